from typing import Dict, List, Optional

from app.schemas.comment import CommentAdminOut
from app.schemas.common import BulkOperationOut
from app.storage.comment.comment_interface import ICommentRepository
from app.storage.post.post_interface import IPostRepository
from app.storage.user.user_interface import IUserRepository

from app.core.access import Actor, require_admin
from app.core.logx import logger
from app.core.exceptions import CommentNotFound, CommentAlreadyDeleted, PostNotFound, UserNotFound
from app.core.pagination import PageResponse, page_query, DESC

# 管理端的删除都不调整帖子评论数，评论数只由作者自己的发表 / 删除维护

#------------------------------- 查询 ------------------------------------

def list_comments(
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    is_deleted: Optional[bool] = None,
    page: int = 0,
    page_size: int = 10,
    to_dict: bool = True,
) -> Dict | PageResponse[CommentAdminOut]:
    """
    管理员查看所有评论，is_deleted 为空时不过滤删除状态
    """
    require_admin(actor)
    query = page_query(page, page_size, default_direction=DESC)
    result = comment_repo.list_for_admin(query, is_deleted=is_deleted)
    return result.model_dump() if to_dict else result


def list_comments_by_user(
    user_repo: IUserRepository,
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    user_id: str,
    page: int = 0,
    page_size: int = 10,
    to_dict: bool = True,
) -> Dict | PageResponse[CommentAdminOut]:
    """管理员查看某用户的全部评论（含已删除）"""
    require_admin(actor)
    if not user_repo.get_user_by_uid(user_id):
        raise UserNotFound(user_id)
    query = page_query(page, page_size, default_direction=DESC)
    result = comment_repo.list_for_admin(query, user_id=user_id)
    return result.model_dump() if to_dict else result


def list_comments_by_post(
    post_repo: IPostRepository,
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    post_id: str,
    page: int = 0,
    page_size: int = 10,
    to_dict: bool = True,
) -> Dict | PageResponse[CommentAdminOut]:
    """管理员查看某帖子的全部评论（含已删除、回复）"""
    require_admin(actor)
    if not post_repo.get_post_by_pid(post_id):
        raise PostNotFound(post_id)
    query = page_query(page, page_size, default_direction=DESC)
    result = comment_repo.list_for_admin(query, post_id=post_id)
    return result.model_dump() if to_dict else result


def get_comment(
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    cid: str,
    to_dict: bool = True,
) -> Dict | CommentAdminOut:
    """
    管理员：查看单条评论
    - 可见软删除 / 隐藏等所有状态，返回原文
    """
    require_admin(actor)
    comment = comment_repo.get_comment_by_cid_for_admin(cid)
    if not comment:
        raise CommentNotFound(cid)

    logger.info(f"[ADMIN] get comment cid={cid}")
    return comment.model_dump() if to_dict else comment

#------------------------------- 隐藏 / 恢复 -----------------------------------

def set_comment_active(
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    cid: str,
    active: bool,
    reason: Optional[str] = None,
    to_dict: bool = True,
) -> Dict | CommentAdminOut:
    """
    管理员隐藏 / 恢复评论：
    - 隐藏后前台显示占位文本，原文保留
    - 不影响评论数
    - 已软删的评论不能再隐藏 / 恢复，否则会覆盖删除原因
    """
    actor = require_admin(actor)
    current = comment_repo.get_comment_by_cid_for_admin(cid)
    if not current:
        raise CommentNotFound(cid)
    if current.is_deleted:
        raise CommentAlreadyDeleted(cid)

    if not comment_repo.set_active(cid, active, reason):
        raise CommentNotFound(cid)

    updated = comment_repo.get_comment_by_cid_for_admin(cid)
    logger.info(f"[ADMIN] set comment cid={cid} active={active} reason={reason!r} by admin={actor.uid}")
    return updated.model_dump() if to_dict else updated

#------------------------------- 删除：软删 & 硬删 -----------------------------------

def soft_delete_comment(
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    cid: str,
    reason: Optional[str] = None,
) -> bool:
    """
    管理员软删除评论：
    - 记录删除原因和操作者
    - 重复删除报业务冲突
    - 不调整帖子评论数
    """
    actor = require_admin(actor)
    current = comment_repo.get_comment_by_cid_for_admin(cid)
    if not current:
        raise CommentNotFound(cid)
    if current.is_deleted:
        raise CommentAlreadyDeleted(cid)

    comment_repo.soft_delete(cid, deleted_by=actor.uid, reason=reason)
    logger.info(f"[ADMIN] soft deleted comment cid={cid} reason={reason!r} by admin={actor.uid}")
    return True


def hard_delete_comment(
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    cid: str,
) -> bool:
    """
    管理员物理删除评论：
    - 不调整评论数，不级联删除子评论（子评论仍可按 id 查询，只是丢失父评论预览）
    """
    actor = require_admin(actor)
    if not comment_repo.hard_delete(cid):
        raise CommentNotFound(cid)

    logger.info(f"[ADMIN] hard deleted comment cid={cid} by admin={actor.uid}")
    return True


def batch_soft_delete_comments(
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    cids: List[str],
    reason: Optional[str] = None,
    to_dict: bool = True,
) -> Dict | BulkOperationOut:
    """
    管理员批量软删除：一条 UPDATE 完成，不存在或已删除的 id 直接忽略
    """
    actor = require_admin(actor)
    affected = comment_repo.batch_soft_delete(cids, deleted_by=actor.uid, reason=reason)
    result = BulkOperationOut(requested=len(cids), affected=affected)

    logger.info(f"[ADMIN] batch soft deleted comments requested={result.requested} affected={result.affected} by admin={actor.uid}")
    return result.model_dump() if to_dict else result


def batch_hard_delete_comments(
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    cids: List[str],
    to_dict: bool = True,
) -> Dict | BulkOperationOut:
    """
    管理员批量物理删除：一条 DELETE 完成，不存在的 id 直接忽略
    """
    actor = require_admin(actor)
    affected = comment_repo.batch_hard_delete(cids)
    result = BulkOperationOut(requested=len(cids), affected=affected)

    logger.info(f"[ADMIN] batch hard deleted comments requested={result.requested} affected={result.affected} by admin={actor.uid}")
    return result.model_dump() if to_dict else result
