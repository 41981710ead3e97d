from typing import Optional, List
import uuid
from sqlalchemy.orm import Session

from app.models.comment import Comment, truncate_preview
from app.schemas.comment import CommentOut, CommentAdminOut
from app.storage.comment.comment_interface import ICommentRepository
from app.core.pagination import PageQuery, PageResponse, create_page_response
from app.core.db import transaction
from app.core.time import now_utc8

# 父评论预览长度
PARENT_PREVIEW_LENGTH = 50


class SQLAlchemyCommentRepository(ICommentRepository):
    """
    使用 SQLAlchemy 实现的评论仓库
    """

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return self.db.query(Comment)

    def _user_query(self):
        """前台视角：排除已删除"""
        return self._base_query().filter(Comment.is_deleted.is_(False))

    def _get_orm(self, cid: str) -> Optional[Comment]:
        return self._base_query().filter(Comment.cid == cid).first()

    # ------------------------------ ORM -> 输出模型 ------------------------------

    @staticmethod
    def _to_user_out(comment: Comment) -> CommentOut:
        """
        前台展示：
        - 正文用展示内容（删除 / 隐藏时是占位文本）
        - 父评论被删除时预览显示占位文本，被物理删除时预览为空
        """
        parent = comment.parent
        author = comment.author
        post = comment.post
        return CommentOut(
            cid=comment.cid,
            content=comment.display_content,
            post_id=comment.post_id,
            post_title=post.title if post else None,
            user_id=comment.user_id,
            username=author.username if author else None,
            user_avatar_url=author.avatar_url if author else None,
            parent_comment_id=comment.parent_comment_id,
            parent_content_preview=truncate_preview(parent.display_content, PARENT_PREVIEW_LENGTH) if parent else None,
            is_deleted=comment.is_deleted,
            is_active=comment.is_active,
            is_edited=comment.is_edited,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )

    @staticmethod
    def _to_admin_out(comment: Comment) -> CommentAdminOut:
        author = comment.author
        post = comment.post
        return CommentAdminOut(
            cid=comment.cid,
            content=comment.content,
            post_id=comment.post_id,
            post_title=post.title if post else None,
            user_id=comment.user_id,
            username=author.username if author else None,
            parent_comment_id=comment.parent_comment_id,
            is_deleted=comment.is_deleted,
            is_active=comment.is_active,
            delete_reason=comment.delete_reason,
            deleted_by=comment.deleted_by,
            deleted_at=comment.deleted_at,
            status_description=comment.status_description,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )

    def _page(self, base_q, query: PageQuery, order_by, to_out) -> PageResponse:
        total = base_q.count()
        rows = (
            base_q
            .order_by(*order_by)
            .offset(query.offset)
            .limit(query.limit)
            .all()
        )
        items = [to_out(c) for c in rows]
        return create_page_response(items, query.page, query.size, total)

    @staticmethod
    def _order_by_time(query: PageQuery):
        if query.descending:
            return Comment.created_at.desc(), Comment._id.desc()
        return Comment.created_at.asc(), Comment._id.asc()

    # ------------------------------ 增 ------------------------------

    def create_comment(self, post_id: str, user_id: str, content: str, parent_comment_id: Optional[str]) -> CommentAdminOut:
        now = now_utc8()
        comment = Comment(
            cid=str(uuid.uuid4()),
            post_id=post_id,
            user_id=user_id,
            content=content,
            parent_comment_id=parent_comment_id,
            is_deleted=False,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

        with transaction(self.db):
            self.db.add(comment)

        self.db.refresh(comment)
        return self._to_admin_out(comment)

    # ------------------------------ 查 ------------------------------

    def get_comment_by_cid_for_admin(self, cid: str) -> Optional[CommentAdminOut]:
        comment = self._get_orm(cid)
        return self._to_admin_out(comment) if comment else None

    def get_comment_by_cid_for_user(self, cid: str) -> Optional[CommentOut]:
        comment = self._user_query().filter(Comment.cid == cid).first()
        return self._to_user_out(comment) if comment else None

    def list_top_level_by_post_for_user(self, post_id: str, query: PageQuery) -> PageResponse[CommentOut]:
        base_q = self._user_query().filter(
            Comment.post_id == post_id,
            Comment.parent_comment_id.is_(None),
        )
        return self._page(base_q, query, self._order_by_time(query), self._to_user_out)

    def list_replies_for_user(self, parent_cid: str, query: PageQuery) -> PageResponse[CommentOut]:
        base_q = self._user_query().filter(Comment.parent_comment_id == parent_cid)
        return self._page(base_q, query, self._order_by_time(query), self._to_user_out)

    def list_by_user_for_user(self, user_id: str, query: PageQuery) -> PageResponse[CommentOut]:
        base_q = self._user_query().filter(
            Comment.user_id == user_id,
            Comment.is_active.is_(True),
        )
        return self._page(base_q, query, self._order_by_time(query), self._to_user_out)

    def list_for_admin(
        self,
        query: PageQuery,
        is_deleted: Optional[bool] = None,
        user_id: Optional[str] = None,
        post_id: Optional[str] = None,
    ) -> PageResponse[CommentAdminOut]:
        base_q = self._base_query()
        if is_deleted is not None:
            base_q = base_q.filter(Comment.is_deleted.is_(is_deleted))
        if user_id is not None:
            base_q = base_q.filter(Comment.user_id == user_id)
        if post_id is not None:
            base_q = base_q.filter(Comment.post_id == post_id)
        return self._page(base_q, query, self._order_by_time(query), self._to_admin_out)

    # ------------------------------ 改 ------------------------------

    def update_content(self, cid: str, content: str) -> Optional[CommentAdminOut]:
        """只改正文和更新时间，创建时间不动（用于判断是否编辑过）"""
        comment = self._get_orm(cid)
        if not comment:
            return None

        with transaction(self.db):
            comment.content = content
            comment.updated_at = now_utc8()

        self.db.refresh(comment)
        return self._to_admin_out(comment)

    def soft_delete(self, cid: str, deleted_by: Optional[str], reason: Optional[str] = None) -> bool:
        comment = self._get_orm(cid)
        if not comment:
            return False

        with transaction(self.db):
            comment.mark_as_deleted(deleted_by, reason)

        return True

    def set_active(self, cid: str, active: bool, reason: Optional[str] = None) -> bool:
        comment = self._get_orm(cid)
        if not comment:
            return False

        with transaction(self.db):
            if active:
                comment.mark_as_active()
            else:
                comment.mark_as_inactive(reason)

        return True

    def _bulk_mark_deleted(self, criteria, deleted_by: Optional[str], reason: Optional[str]) -> int:
        now = now_utc8()
        with transaction(self.db):
            affected = (
                self._user_query()
                .filter(*criteria)
                .update(
                    {
                        Comment.is_deleted: True,
                        Comment.deleted_by: deleted_by,
                        Comment.delete_reason: reason,
                        Comment.deleted_at: now,
                        Comment.updated_at: now,
                    },
                    synchronize_session="fetch",
                )
            )
        return affected

    def soft_delete_by_post(self, post_id: str, deleted_by: Optional[str], reason: Optional[str] = None) -> int:
        return self._bulk_mark_deleted([Comment.post_id == post_id], deleted_by, reason)

    def batch_soft_delete(self, cids: List[str], deleted_by: Optional[str], reason: Optional[str] = None) -> int:
        if not cids:
            return 0
        return self._bulk_mark_deleted([Comment.cid.in_(cids)], deleted_by, reason)

    # ------------------------------ 删 ------------------------------

    def hard_delete(self, cid: str) -> bool:
        """物理删除，不处理子评论"""
        comment = self._get_orm(cid)
        if not comment:
            return False

        with transaction(self.db):
            self.db.delete(comment)

        return True

    def batch_hard_delete(self, cids: List[str]) -> int:
        if not cids:
            return 0
        with transaction(self.db):
            affected = (
                self._base_query()
                .filter(Comment.cid.in_(cids))
                .delete(synchronize_session="fetch")
            )
        return affected
