from typing import Optional

from fastapi import APIRouter, Depends

from app.schemas.post import (
    PostOut,
    PostStatusUpdate,
    PostFlagUpdate,
    PostActionRequest,
    BatchPostStatusUpdate,
)
from app.schemas.common import BatchOperationOut
from app.core.access import Actor
from app.core.auth import get_current_actor
from app.core.biz_response import BizResponse
from app.service import admin_post_svc

from app.storage.database import get_post_repo, get_comment_repo, get_uow
from app.storage.post.post_interface import IPostRepository
from app.storage.comment.comment_interface import ICommentRepository
from app.storage.unit_of_work import IUnitOfWork

from app.core.exceptions import PostNotFound, InvalidArgument, PermissionDenied
from app.core.logx import logger

admin_posts_router = APIRouter(prefix="/admin/posts", tags=["admin-posts"])


# --------------------------------- 列表 / 字典 ---------------------------------
@admin_posts_router.get("/")
def list_posts(
    page: int = 0,
    page_size: int = 10,
    sort: Optional[str] = None,
    direction: Optional[str] = None,
    status: Optional[str] = None,
    category: Optional[str] = None,
    actor: Actor = Depends(get_current_actor),
    post_repo: IPostRepository = Depends(get_post_repo),
):
    """
    所有帖子（任意状态），可按状态、分类过滤
    sort 可选 created_at / updated_at / view_count / comment_count，默认 created_at 倒序
    """
    try:
        result = admin_post_svc.list_posts(
            post_repo=post_repo,
            actor=actor,
            status=status,
            category=category,
            page=page,
            page_size=page_size,
            sort=sort,
            direction=direction,
            to_dict=True,
        )
        return BizResponse(data=result)
    except InvalidArgument as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_posts_router.get("/review")
def list_posts_for_review(
    page: int = 0,
    page_size: int = 10,
    actor: Actor = Depends(get_current_actor),
    post_repo: IPostRepository = Depends(get_post_repo),
):
    """待审核帖子（草稿），最新的在前"""
    try:
        result = admin_post_svc.list_posts_for_review(
            post_repo=post_repo,
            actor=actor,
            page=page,
            page_size=page_size,
            to_dict=True,
        )
        return BizResponse(data=result)
    except InvalidArgument as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_posts_router.get("/category-stats")
def category_stats(
    status: Optional[str] = None,
    actor: Actor = Depends(get_current_actor),
    post_repo: IPostRepository = Depends(get_post_repo),
):
    """各分类的帖子数"""
    try:
        result = admin_post_svc.category_stats(post_repo=post_repo, actor=actor, status=status, to_dict=True)
        return BizResponse(data=result)
    except InvalidArgument as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_posts_router.get("/categories")
def list_categories(actor: Actor = Depends(get_current_actor)):
    """所有分类"""
    try:
        return BizResponse(data=admin_post_svc.list_categories(actor=actor, to_dict=True))
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)


@admin_posts_router.get("/statuses")
def list_statuses(actor: Actor = Depends(get_current_actor)):
    """所有帖子状态"""
    try:
        return BizResponse(data=admin_post_svc.list_statuses(actor=actor, to_dict=True))
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)


# --------------------------------- 批量 ---------------------------------
@admin_posts_router.put("/batch/status", response_model=BatchOperationOut)
def batch_update_post_status(
    payload: BatchPostStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    uow: IUnitOfWork = Depends(get_uow),
    post_repo: IPostRepository = Depends(get_post_repo),
):
    """
    批量修改帖子状态，逐条处理，返回每条的结果
    """
    try:
        result = admin_post_svc.batch_update_post_status(
            uow=uow,
            post_repo=post_repo,
            actor=actor,
            post_ids=payload.post_ids,
            status=payload.status,
            to_dict=True,
        )
        return BizResponse(data=result)
    except InvalidArgument as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


# --------------------------------- 单个帖子 ---------------------------------
@admin_posts_router.get("/{pid}", response_model=PostOut)
def get_post(
    pid: str,
    actor: Actor = Depends(get_current_actor),
    post_repo: IPostRepository = Depends(get_post_repo),
):
    try:
        post = admin_post_svc.get_post(post_repo=post_repo, actor=actor, pid=pid, to_dict=True)
        return BizResponse(data=post)
    except PostNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_posts_router.put("/{pid}/status", response_model=PostOut)
def update_post_status(
    pid: str,
    payload: PostStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    post_repo: IPostRepository = Depends(get_post_repo),
):
    """
    修改帖子状态（DRAFT / PUBLISHED / HIDDEN / DELETED）
    """
    try:
        post = admin_post_svc.update_post_status(
            post_repo=post_repo,
            actor=actor,
            pid=pid,
            status=payload.status,
            to_dict=True,
        )
        return BizResponse(data=post)
    except PostNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except InvalidArgument as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_posts_router.put("/{pid}/top", response_model=PostOut)
def set_top(
    pid: str,
    payload: PostFlagUpdate,
    actor: Actor = Depends(get_current_actor),
    post_repo: IPostRepository = Depends(get_post_repo),
):
    """设置 / 取消置顶"""
    try:
        post = admin_post_svc.set_top(post_repo=post_repo, actor=actor, pid=pid, value=payload.value, to_dict=True)
        return BizResponse(data=post)
    except PostNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_posts_router.put("/{pid}/recommended", response_model=PostOut)
def set_recommended(
    pid: str,
    payload: PostFlagUpdate,
    actor: Actor = Depends(get_current_actor),
    post_repo: IPostRepository = Depends(get_post_repo),
):
    """设置 / 取消推荐"""
    try:
        post = admin_post_svc.set_recommended(post_repo=post_repo, actor=actor, pid=pid, value=payload.value, to_dict=True)
        return BizResponse(data=post)
    except PostNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_posts_router.delete("/{pid}")
def delete_post(
    pid: str,
    actor: Actor = Depends(get_current_actor),
    uow: IUnitOfWork = Depends(get_uow),
    post_repo: IPostRepository = Depends(get_post_repo),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """
    删除帖子：评论软删除，帖子物理删除
    """
    try:
        ok = admin_post_svc.delete_post(uow=uow, post_repo=post_repo, comment_repo=comment_repo, actor=actor, pid=pid)
        return BizResponse(data=ok, msg="post deleted")
    except PostNotFound as e:
        return BizResponse(data=False, msg=str(e), status_code=404)
    except PermissionDenied as e:
        return BizResponse(data=False, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=False, msg=str(e), status_code=500)


@admin_posts_router.post("/{pid}/action")
def execute_post_action(
    pid: str,
    payload: PostActionRequest,
    actor: Actor = Depends(get_current_actor),
    uow: IUnitOfWork = Depends(get_uow),
    post_repo: IPostRepository = Depends(get_post_repo),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """
    快捷操作：approve / reject / set_top / remove_top / set_recommended / remove_recommended / delete
    """
    try:
        post = admin_post_svc.execute_post_action(
            uow=uow,
            post_repo=post_repo,
            comment_repo=comment_repo,
            actor=actor,
            pid=pid,
            action=payload.action,
            reason=payload.reason,
        )
        return BizResponse(data=post, msg=f"action {payload.action} executed")
    except PostNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except InvalidArgument as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)
