from typing import Optional, List, Tuple, Dict, Any
import uuid
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.models.post import Post, PostStatus
from app.models.post_stats import PostStats
from app.schemas.post import PostOut
from app.storage.post.post_interface import IPostRepository
from app.core.pagination import PageQuery, PageResponse, create_page_response
from app.core.db import transaction
from app.core.time import now_utc8

# 可排序字段 -> 实际列（浏览数、评论数在统计表）
SORT_COLUMNS = {
    "created_at": Post.created_at,
    "updated_at": Post.updated_at,
    "published_at": Post.published_at,
    "view_count": PostStats.view_count,
    "comment_count": PostStats.comment_count,
}


class SQLAlchemyPostRepository(IPostRepository):
    """
    使用 SQLAlchemy 实现的帖子仓库
    业务层依赖 IPostRepository 接口，而不是这个具体实现
    """

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return self.db.query(Post)

    def _get_orm(self, pid: str) -> Optional[Post]:
        return self._base_query().filter(Post.pid == pid).first()

    # ------------------------------ 增 ------------------------------

    def create_post(self, fields: Dict[str, Any]) -> PostOut:
        post = Post(pid=str(uuid.uuid4()), **fields)
        post.post_stats = PostStats(view_count=0, comment_count=0)

        with transaction(self.db):
            self.db.add(post)

        self.db.refresh(post)
        return PostOut.model_validate(post)

    # ------------------------------ 查 ------------------------------

    def get_post_by_pid(self, pid: str) -> Optional[PostOut]:
        post = self._get_orm(pid)
        return PostOut.model_validate(post) if post else None

    def get_post_by_slug(self, slug: str) -> Optional[PostOut]:
        post = self._base_query().filter(Post.slug == slug).first()
        return PostOut.model_validate(post) if post else None

    def list_posts(
        self,
        query: PageQuery,
        sort_column: str,
        status: Optional[str] = None,
        category: Optional[str] = None,
        author_id: Optional[str] = None,
        keyword: Optional[str] = None,
    ) -> PageResponse[PostOut]:
        """
        分页查询帖子：
        - 统计表 outer join，方便按浏览数 / 评论数排序
        - 排序值相同时按自增主键倒序，保证翻页稳定
        """
        base_q = self._base_query().outerjoin(PostStats, PostStats.post_id == Post.pid)

        if status is not None:
            base_q = base_q.filter(Post.status == status)
        if category is not None:
            base_q = base_q.filter(Post.category == category)
        if author_id is not None:
            base_q = base_q.filter(Post.author_id == author_id)
        if keyword:
            pattern = f"%{keyword}%"
            base_q = base_q.filter(or_(Post.title.like(pattern), Post.content.like(pattern)))

        column = SORT_COLUMNS[sort_column]
        order = column.desc() if query.descending else column.asc()

        total = base_q.count()
        posts_orm = (
            base_q
            .order_by(order, Post._id.desc())
            .offset(query.offset)
            .limit(query.limit)
            .all()
        )

        items = [PostOut.model_validate(p) for p in posts_orm]
        return create_page_response(items, query.page, query.size, total)

    def list_flagged(self, flag: str, limit: int) -> List[PostOut]:
        column = getattr(Post, flag)
        posts_orm = (
            self._base_query()
            .filter(Post.status == PostStatus.PUBLISHED.value, column.is_(True))
            .order_by(Post.published_at.desc(), Post._id.desc())
            .limit(limit)
            .all()
        )
        return [PostOut.model_validate(p) for p in posts_orm]

    def count_by_category(self, status: Optional[str] = None) -> List[Tuple[Optional[str], int]]:
        q = self.db.query(Post.category, func.count(Post._id))
        if status is not None:
            q = q.filter(Post.status == status)
        rows = q.group_by(Post.category).order_by(func.count(Post._id).desc()).all()
        return [(category, count) for category, count in rows]

    # ------------------------------ 改 ------------------------------

    def update_post(self, pid: str, fields: Dict[str, Any]) -> Optional[PostOut]:
        post = self._get_orm(pid)
        if not post:
            return None

        with transaction(self.db):
            for field, value in fields.items():
                setattr(post, field, value)
            post.updated_at = now_utc8()

        self.db.refresh(post)
        return PostOut.model_validate(post)

    # ------------------------------ 删 ------------------------------

    def delete_post(self, pid: str) -> bool:
        post = self._get_orm(pid)
        if not post:
            return False

        with transaction(self.db):
            self.db.delete(post)

        return True
