from typing import Optional, Protocol, List

from app.core.pagination import PageQuery, PageResponse
from app.schemas.comment import CommentOut, CommentAdminOut

class ICommentRepository(Protocol):
    """
    评论仓库接口协议：
    - *_for_user：前台视角，排除已删除评论，隐藏评论正文替换为占位文本
    - *_for_admin：管理端视角，所有状态可见，返回原文
    """

    # ------------------------------ 增 ------------------------------

    def create_comment(self, post_id: str, user_id: str, content: str, parent_comment_id: Optional[str]) -> CommentAdminOut:
        ...

    # ------------------------------ 查 ------------------------------

    def get_comment_by_cid_for_admin(self, cid: str) -> Optional[CommentAdminOut]:
        """任意状态"""
        ...

    def get_comment_by_cid_for_user(self, cid: str) -> Optional[CommentOut]:
        """已删除的评论返回 None"""
        ...

    def list_top_level_by_post_for_user(self, post_id: str, query: PageQuery) -> PageResponse[CommentOut]:
        """某帖子的顶级评论，新的在前"""
        ...

    def list_replies_for_user(self, parent_cid: str, query: PageQuery) -> PageResponse[CommentOut]:
        """某评论的直接回复（一层），按时间正序"""
        ...

    def list_by_user_for_user(self, user_id: str, query: PageQuery) -> PageResponse[CommentOut]:
        """某用户可见（未删除且未隐藏）的评论，新的在前"""
        ...

    def list_for_admin(
        self,
        query: PageQuery,
        is_deleted: Optional[bool] = None,
        user_id: Optional[str] = None,
        post_id: Optional[str] = None,
    ) -> PageResponse[CommentAdminOut]:
        """管理端分页，过滤条件为空表示不过滤"""
        ...

    # ------------------------------ 改 ------------------------------

    def update_content(self, cid: str, content: str) -> Optional[CommentAdminOut]:
        ...

    def soft_delete(self, cid: str, deleted_by: Optional[str], reason: Optional[str] = None) -> bool:
        ...

    def set_active(self, cid: str, active: bool, reason: Optional[str] = None) -> bool:
        ...

    def soft_delete_by_post(self, post_id: str, deleted_by: Optional[str], reason: Optional[str] = None) -> int:
        """把某帖子下所有未删除评论标记为删除，返回影响行数"""
        ...

    def batch_soft_delete(self, cids: List[str], deleted_by: Optional[str], reason: Optional[str] = None) -> int:
        """单条 UPDATE，不存在的 id 直接忽略，返回影响行数"""
        ...

    # ------------------------------ 删 ------------------------------

    def hard_delete(self, cid: str) -> bool:
        ...

    def batch_hard_delete(self, cids: List[str]) -> int:
        """单条 DELETE，不存在的 id 直接忽略，返回影响行数"""
        ...
