from typing import Optional

from fastapi import APIRouter, Depends

from app.schemas.comment import CommentAdminOut, CommentModerationRequest, BatchCommentIds
from app.schemas.common import BulkOperationOut
from app.core.access import Actor
from app.core.auth import get_current_actor
from app.core.biz_response import BizResponse
from app.service import admin_comment_svc

from app.storage.database import get_user_repo, get_post_repo, get_comment_repo
from app.storage.user.user_interface import IUserRepository
from app.storage.post.post_interface import IPostRepository
from app.storage.comment.comment_interface import ICommentRepository

from app.core.exceptions import ResourceNotFound, BusinessConflict, PermissionDenied
from app.core.logx import logger

admin_comments_router = APIRouter(prefix="/admin/comments", tags=["admin-comments"])


# --------------------------------- 查询 ---------------------------------
@admin_comments_router.get("/")
def list_comments(
    page: int = 0,
    page_size: int = 10,
    is_deleted: Optional[bool] = None,
    actor: Actor = Depends(get_current_actor),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """
    所有评论（含已删除 / 已隐藏），可按删除状态过滤
    """
    try:
        result = admin_comment_svc.list_comments(
            comment_repo=comment_repo,
            actor=actor,
            is_deleted=is_deleted,
            page=page,
            page_size=page_size,
            to_dict=True,
        )
        return BizResponse(data=result)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_comments_router.get("/deleted/{is_deleted}")
def list_comments_by_deleted(
    is_deleted: bool,
    page: int = 0,
    page_size: int = 10,
    actor: Actor = Depends(get_current_actor),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """按删除状态查看评论"""
    try:
        result = admin_comment_svc.list_comments(
            comment_repo=comment_repo,
            actor=actor,
            is_deleted=is_deleted,
            page=page,
            page_size=page_size,
            to_dict=True,
        )
        return BizResponse(data=result)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_comments_router.get("/users/{uid}")
def list_comments_by_user(
    uid: str,
    page: int = 0,
    page_size: int = 10,
    actor: Actor = Depends(get_current_actor),
    user_repo: IUserRepository = Depends(get_user_repo),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    try:
        result = admin_comment_svc.list_comments_by_user(
            user_repo=user_repo,
            comment_repo=comment_repo,
            actor=actor,
            user_id=uid,
            page=page,
            page_size=page_size,
            to_dict=True,
        )
        return BizResponse(data=result)
    except ResourceNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_comments_router.get("/posts/{post_id}")
def list_comments_by_post(
    post_id: str,
    page: int = 0,
    page_size: int = 10,
    actor: Actor = Depends(get_current_actor),
    post_repo: IPostRepository = Depends(get_post_repo),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    try:
        result = admin_comment_svc.list_comments_by_post(
            post_repo=post_repo,
            comment_repo=comment_repo,
            actor=actor,
            post_id=post_id,
            page=page,
            page_size=page_size,
            to_dict=True,
        )
        return BizResponse(data=result)
    except ResourceNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


# --------------------------------- 批量 ---------------------------------
@admin_comments_router.put("/batch/soft-delete", response_model=BulkOperationOut)
def batch_soft_delete_comments(
    payload: BatchCommentIds,
    actor: Actor = Depends(get_current_actor),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """
    批量软删除评论，不存在 / 已删除的 id 忽略
    """
    try:
        result = admin_comment_svc.batch_soft_delete_comments(
            comment_repo=comment_repo,
            actor=actor,
            cids=payload.comment_ids,
            reason=payload.reason,
            to_dict=True,
        )
        return BizResponse(data=result)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_comments_router.delete("/batch", response_model=BulkOperationOut)
def batch_hard_delete_comments(
    payload: BatchCommentIds,
    actor: Actor = Depends(get_current_actor),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """
    批量物理删除评论
    """
    try:
        result = admin_comment_svc.batch_hard_delete_comments(
            comment_repo=comment_repo,
            actor=actor,
            cids=payload.comment_ids,
            to_dict=True,
        )
        return BizResponse(data=result)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


# --------------------------------- 单条评论 ---------------------------------
@admin_comments_router.get("/{cid}", response_model=CommentAdminOut)
def get_comment(
    cid: str,
    actor: Actor = Depends(get_current_actor),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    try:
        comment = admin_comment_svc.get_comment(comment_repo=comment_repo, actor=actor, cid=cid, to_dict=True)
        return BizResponse(data=comment)
    except ResourceNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_comments_router.put("/{cid}/soft-delete")
def soft_delete_comment(
    cid: str,
    payload: Optional[CommentModerationRequest] = None,
    actor: Actor = Depends(get_current_actor),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """
    软删除评论（不调整帖子评论数）
    """
    try:
        ok = admin_comment_svc.soft_delete_comment(
            comment_repo=comment_repo,
            actor=actor,
            cid=cid,
            reason=payload.reason if payload else None,
        )
        return BizResponse(data=ok, msg="comment soft deleted")
    except ResourceNotFound as e:
        return BizResponse(data=False, msg=str(e), status_code=404)
    except BusinessConflict as e:
        return BizResponse(data=False, msg=str(e), status_code=400)
    except PermissionDenied as e:
        return BizResponse(data=False, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=False, msg=str(e), status_code=500)


@admin_comments_router.put("/{cid}/hide", response_model=CommentAdminOut)
def hide_comment(
    cid: str,
    payload: Optional[CommentModerationRequest] = None,
    actor: Actor = Depends(get_current_actor),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """隐藏评论，前台显示占位文本"""
    try:
        comment = admin_comment_svc.set_comment_active(
            comment_repo=comment_repo,
            actor=actor,
            cid=cid,
            active=False,
            reason=payload.reason if payload else None,
            to_dict=True,
        )
        return BizResponse(data=comment)
    except ResourceNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except BusinessConflict as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_comments_router.put("/{cid}/unhide", response_model=CommentAdminOut)
def unhide_comment(
    cid: str,
    actor: Actor = Depends(get_current_actor),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """取消隐藏"""
    try:
        comment = admin_comment_svc.set_comment_active(
            comment_repo=comment_repo,
            actor=actor,
            cid=cid,
            active=True,
            to_dict=True,
        )
        return BizResponse(data=comment)
    except ResourceNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except BusinessConflict as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_comments_router.delete("/{cid}")
def hard_delete_comment(
    cid: str,
    actor: Actor = Depends(get_current_actor),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """
    物理删除评论
    """
    try:
        ok = admin_comment_svc.hard_delete_comment(comment_repo=comment_repo, actor=actor, cid=cid)
        return BizResponse(data=ok, msg="comment deleted")
    except ResourceNotFound as e:
        return BizResponse(data=False, msg=str(e), status_code=404)
    except PermissionDenied as e:
        return BizResponse(data=False, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=False, msg=str(e), status_code=500)
