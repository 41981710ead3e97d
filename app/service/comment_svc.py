from typing import Dict, Optional

from app.schemas.comment import (
    CommentCreate,
    CommentUpdate,
    CommentOut,
)
from app.storage.comment.comment_interface import ICommentRepository
from app.storage.post.post_interface import IPostRepository
from app.storage.post_stats.post_stats_interface import IPostStatsRepository
from app.storage.user.user_interface import IUserRepository
from app.storage.unit_of_work import IUnitOfWork
from app.models.post import PostStatus

from app.core.access import Actor, require_authenticated, require_owner
from app.core.logx import logger
from app.core.exceptions import (
    UserNotFound,
    PostNotFound,
    CommentNotFound,
    CommentAlreadyDeleted,
    PostNotPublished,
)
from app.core.pagination import PageResponse, page_query, create_page_response, ASC, DESC

# 顶级评论列表里每条附带的回复预览条数
REPLY_PREVIEW_SIZE = 3

#---------------------------------------- 评论数维护 -----------------------------------------

def adjust_post_comment_count(stats_repo: IPostStatsRepository, post_id: str, step: int) -> None:
    """
    帖子评论数只在这里修改：
    - 用户发表评论 +1
    - 用户自己删除评论 -1
    管理员的删除 / 批量删除 / 帖子级联删除都不经过这里
    """
    stats = stats_repo.update_comments(post_id=post_id, step=step)
    if stats is None:
        logger.warning(f"post_stats missing for post_id={post_id}, comment_count not adjusted")
        return
    logger.info(f"Adjusted comment_count for post_id={post_id} by {step:+d} -> {stats.comment_count}")


def _with_viewer(comment: CommentOut, actor: Optional[Actor]) -> CommentOut:
    """按查看者计算 can_edit：本人且评论未删除"""
    can_edit = actor is not None and actor.uid == comment.user_id and not comment.is_deleted
    replies = [_with_viewer(r, actor) for r in comment.replies]
    return comment.model_copy(update={"can_edit": can_edit, "replies": replies})


def _page_with_viewer(page: PageResponse, actor: Optional[Actor]) -> PageResponse:
    items = [_with_viewer(c, actor) for c in page.content]
    return create_page_response(items, page.page, page.size, page.total_elements)

#---------------------------------------- 增 -----------------------------------------

def create_comment(
    uow: IUnitOfWork,
    user_repo: IUserRepository,
    post_repo: IPostRepository,
    comment_repo: ICommentRepository,
    stats_repo: IPostStatsRepository,
    actor: Optional[Actor],
    data: CommentCreate,
    to_dict: bool = True,
) -> Dict | CommentOut:
    """
    创建评论（业务接口）：
    1. 必须登录，且用户存在
    2. 帖子存在且已发布
    3. 有父评论时，父评论必须存在且未删除
    4. 写入评论，帖子评论数 +1（同一事务）
    5. 返回按当前用户视角渲染的评论
    """
    actor = require_authenticated(actor)

    # 1. 校验用户是否存在
    if not user_repo.get_user_by_uid(actor.uid):
        raise UserNotFound(actor.uid)

    # 2. 校验帖子是否存在且已发布
    post = post_repo.get_post_by_pid(data.post_id)
    if not post:
        raise PostNotFound(data.post_id)
    if post.status != PostStatus.PUBLISHED.value:
        raise PostNotPublished(data.post_id)

    # 3. 父评论只在创建时校验一次
    if data.parent_comment_id is not None:
        parent = comment_repo.get_comment_by_cid_for_admin(data.parent_comment_id)
        if not parent or parent.is_deleted:
            raise CommentNotFound(data.parent_comment_id, message=f"Parent comment not found with id: {data.parent_comment_id}")

    # 4. 评论 + 计数在同一个事务里
    with uow.atomic():
        created = comment_repo.create_comment(
            post_id=data.post_id,
            user_id=actor.uid,
            content=data.content,
            parent_comment_id=data.parent_comment_id,
        )
        adjust_post_comment_count(stats_repo, data.post_id, step=1)

    logger.info(f"Created comment cid={created.cid} on post={data.post_id} by author={actor.uid} parent={data.parent_comment_id}")

    # 5. 返回完整的评论信息（用户可见视角）
    comment_out = comment_repo.get_comment_by_cid_for_user(created.cid)
    if not comment_out:
        raise CommentNotFound(created.cid)

    comment_out = _with_viewer(comment_out, actor)
    return comment_out.model_dump() if to_dict else comment_out

#------------------------------- 查询 ------------------------------------

def get_comment(
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    cid: str,
    to_dict: bool = True,
) -> Dict | CommentOut:
    """
    查看单条评论：已删除的评论视为不存在
    """
    comment = comment_repo.get_comment_by_cid_for_user(cid)
    if not comment:
        raise CommentNotFound(cid)

    comment = _with_viewer(comment, actor)
    return comment.model_dump() if to_dict else comment


def list_post_comments(
    post_repo: IPostRepository,
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    post_id: str,
    page: int = 0,
    page_size: int = 10,
    to_dict: bool = True,
) -> Dict | PageResponse[CommentOut]:
    """
    某帖子的顶级评论（新的在前），每条附带回复总数和前几条回复
    """
    if not post_repo.get_post_by_pid(post_id):
        raise PostNotFound(post_id)

    query = page_query(page, page_size, default_direction=DESC)
    result = comment_repo.list_top_level_by_post_for_user(post_id, query)

    preview_query = page_query(0, REPLY_PREVIEW_SIZE, default_direction=ASC)
    items = []
    for comment in result.content:
        replies = comment_repo.list_replies_for_user(comment.cid, preview_query)
        items.append(comment.model_copy(update={
            "replies": replies.content,
            "reply_count": replies.total_elements,
        }))

    result = _page_with_viewer(create_page_response(items, result.page, result.size, result.total_elements), actor)
    return result.model_dump() if to_dict else result


def list_replies(
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    cid: str,
    page: int = 0,
    page_size: int = 10,
    to_dict: bool = True,
) -> Dict | PageResponse[CommentOut]:
    """
    某条评论的直接回复（只取一层），按时间正序
    父评论本身已删除时仍然可以查看其回复
    """
    if not comment_repo.get_comment_by_cid_for_admin(cid):
        raise CommentNotFound(cid)

    query = page_query(page, page_size, default_direction=ASC)
    result = _page_with_viewer(comment_repo.list_replies_for_user(cid, query), actor)
    return result.model_dump() if to_dict else result


def list_my_comments(
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    page: int = 0,
    page_size: int = 10,
    to_dict: bool = True,
) -> Dict | PageResponse[CommentOut]:
    """当前用户自己的评论历史（只含可见评论）"""
    actor = require_authenticated(actor)
    query = page_query(page, page_size, default_direction=DESC)
    result = _page_with_viewer(comment_repo.list_by_user_for_user(actor.uid, query), actor)
    return result.model_dump() if to_dict else result


def list_user_comments(
    user_repo: IUserRepository,
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    user_id: str,
    page: int = 0,
    page_size: int = 10,
    to_dict: bool = True,
) -> Dict | PageResponse[CommentOut]:
    """某个用户的公开评论历史（只含可见评论）"""
    if not user_repo.get_user_by_uid(user_id):
        raise UserNotFound(user_id)

    query = page_query(page, page_size, default_direction=DESC)
    result = _page_with_viewer(comment_repo.list_by_user_for_user(user_id, query), actor)
    return result.model_dump() if to_dict else result

#------------------------------- 更新 -----------------------------------

def update_comment(
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    cid: str,
    data: CommentUpdate,
    to_dict: bool = True,
) -> Dict | CommentOut:
    """
    作者修改评论：
    - 只能修改自己的评论
    - 已删除的评论不能修改
    - 只更新正文和更新时间
    """
    current = comment_repo.get_comment_by_cid_for_admin(cid)
    if not current:
        raise CommentNotFound(cid)
    actor = require_owner(actor, current.user_id, "You can only edit your own comments")
    if current.is_deleted:
        raise CommentAlreadyDeleted(cid, message=f"Cannot edit deleted comment {cid}")

    if not comment_repo.update_content(cid, data.content):
        raise CommentNotFound(cid)

    updated = comment_repo.get_comment_by_cid_for_user(cid)
    if not updated:
        raise CommentNotFound(cid)

    logger.info(f"Updated comment cid={cid} by author={actor.uid}")
    updated = _with_viewer(updated, actor)
    return updated.model_dump() if to_dict else updated

#------------------------------- 删除 -----------------------------------

def delete_comment(
    uow: IUnitOfWork,
    comment_repo: ICommentRepository,
    stats_repo: IPostStatsRepository,
    actor: Optional[Actor],
    cid: str,
) -> bool:
    """
    用户删除自己的评论（软删除）：
    1. 只能删除自己的评论
    2. 重复删除报业务冲突
    3. 标记删除 + 帖子评论数 -1（同一事务）
    子评论不受影响
    """
    current = comment_repo.get_comment_by_cid_for_admin(cid)
    if not current:
        raise CommentNotFound(cid)
    actor = require_owner(actor, current.user_id, "You can only delete your own comments")
    if current.is_deleted:
        raise CommentAlreadyDeleted(cid)

    with uow.atomic():
        if not comment_repo.soft_delete(cid, deleted_by=actor.uid, reason=None):
            raise CommentNotFound(cid)
        adjust_post_comment_count(stats_repo, current.post_id, step=-1)

    logger.info(f"Soft deleted comment cid={cid} by author={actor.uid}")
    return True
