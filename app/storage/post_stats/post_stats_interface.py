from typing import Optional, Protocol
from app.schemas.post_stats import PostStatsOut

class IPostStatsRepository(Protocol):
    """
    帖子统计仓库接口：
    浏览数 / 评论数只能通过这里的自增、自减方法修改
    """

    def get_by_post_id(self, post_id: str) -> Optional[PostStatsOut]:
        """根据帖子 ID 获取统计信息"""
        ...

    def update_comments(self, post_id: str, step: int = 1) -> Optional[PostStatsOut]:
        """评论数原子自增/自减（不小于 0），帖子没有统计记录时返回 None"""
        ...

    def update_views(self, post_id: str, step: int = 1) -> Optional[PostStatsOut]:
        """浏览数原子自增"""
        ...
