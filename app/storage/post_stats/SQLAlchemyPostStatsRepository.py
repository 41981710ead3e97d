# app/storage/post_stats/SQLAlchemyPostStatsRepository.py

from typing import Optional
from sqlalchemy import case
from sqlalchemy.orm import Session

from app.models.post_stats import PostStats
from app.schemas.post_stats import PostStatsOut
from app.storage.post_stats.post_stats_interface import IPostStatsRepository
from app.core.db import transaction


class SQLAlchemyPostStatsRepository(IPostStatsRepository):
    """
    使用 SQLAlchemy 实现的帖子统计仓库
    业务层依赖 IPostStatsRepository 抽象接口
    """

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        """内部基础查询（目前没有软删除字段，预留封装）"""
        return self.db.query(PostStats)

    def _get_stats_orm_by_post_id(self, post_id: str) -> Optional[PostStats]:
        return self._base_query().filter(PostStats.post_id == post_id).first()

    def get_by_post_id(self, post_id: str) -> Optional[PostStatsOut]:
        orm_obj = self._get_stats_orm_by_post_id(post_id)
        return PostStatsOut.model_validate(orm_obj) if orm_obj else None

    def _increment(self, post_id: str, column, step: int) -> Optional[PostStatsOut]:
        """
        在数据库侧做 col = col + step，结果不小于 0
        不在内存里读改写，避免并发请求互相覆盖
        """
        new_value = case((column + step < 0, 0), else_=column + step)

        with transaction(self.db):
            affected = (
                self._base_query()
                .filter(PostStats.post_id == post_id)
                .update({column: new_value}, synchronize_session="fetch")
            )

        if not affected:
            return None

        stats = self._get_stats_orm_by_post_id(post_id)
        self.db.refresh(stats)
        return PostStatsOut.model_validate(stats)

    def update_comments(self, post_id: str, step: int = 1) -> Optional[PostStatsOut]:
        """
        评论数自增/自减，限制不小于 0
        """
        return self._increment(post_id, PostStats.comment_count, step)

    def update_views(self, post_id: str, step: int = 1) -> Optional[PostStatsOut]:
        """
        浏览数自增
        """
        return self._increment(post_id, PostStats.view_count, step)
