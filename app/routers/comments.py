from typing import Optional

from fastapi import APIRouter, Depends

from app.schemas.comment import CommentCreate, CommentUpdate, CommentOut
from app.core.access import Actor
from app.core.auth import get_current_actor, get_optional_actor
from app.core.biz_response import BizResponse
from app.service import comment_svc

from app.storage.database import (
    get_user_repo,
    get_post_repo,
    get_poststats_repo,
    get_comment_repo,
    get_uow,
)
from app.storage.user.user_interface import IUserRepository
from app.storage.post.post_interface import IPostRepository
from app.storage.post_stats.post_stats_interface import IPostStatsRepository
from app.storage.comment.comment_interface import ICommentRepository
from app.storage.unit_of_work import IUnitOfWork

from app.core.exceptions import (
    ResourceNotFound,
    BusinessConflict,
    NotAuthenticated,
    PermissionDenied,
)
from app.core.logx import logger

comments_router = APIRouter(prefix="/comments", tags=["comments"])


# --------------------------------- 发表评论 ---------------------------------
@comments_router.post("/", response_model=CommentOut)
def create_comment(
    payload: CommentCreate,
    actor: Actor = Depends(get_current_actor),
    uow: IUnitOfWork = Depends(get_uow),
    user_repo: IUserRepository = Depends(get_user_repo),
    post_repo: IPostRepository = Depends(get_post_repo),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
    stats_repo: IPostStatsRepository = Depends(get_poststats_repo),
):
    """
    发表评论 / 回复：
    - 只能评论已发布的帖子
    - parent_comment_id 不为空时为回复，父评论必须存在且未删除
    - 帖子评论数 +1
    """
    try:
        comment = comment_svc.create_comment(
            uow=uow,
            user_repo=user_repo,
            post_repo=post_repo,
            comment_repo=comment_repo,
            stats_repo=stats_repo,
            actor=actor,
            data=payload,
            to_dict=True,
        )
        return BizResponse(data=comment, status_code=201)
    except ResourceNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except BusinessConflict as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except NotAuthenticated as e:
        return BizResponse(data=None, msg=str(e), status_code=401)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


# --------------------------------- 列表 ---------------------------------
@comments_router.get("/me")
def list_my_comments(
    page: int = 0,
    page_size: int = 10,
    actor: Actor = Depends(get_current_actor),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """我的评论（不含已删除 / 已隐藏）"""
    try:
        result = comment_svc.list_my_comments(
            comment_repo=comment_repo,
            actor=actor,
            page=page,
            page_size=page_size,
            to_dict=True,
        )
        return BizResponse(data=result)
    except NotAuthenticated as e:
        return BizResponse(data=None, msg=str(e), status_code=401)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@comments_router.get("/post/{post_id}")
def list_post_comments(
    post_id: str,
    page: int = 0,
    page_size: int = 10,
    actor: Optional[Actor] = Depends(get_optional_actor),
    post_repo: IPostRepository = Depends(get_post_repo),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """
    帖子的顶级评论（新的在前），每条带回复总数和最早的几条回复
    """
    try:
        result = comment_svc.list_post_comments(
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
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@comments_router.get("/users/{uid}")
def list_user_comments(
    uid: str,
    page: int = 0,
    page_size: int = 10,
    actor: Optional[Actor] = Depends(get_optional_actor),
    user_repo: IUserRepository = Depends(get_user_repo),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """某个用户的公开评论历史"""
    try:
        result = comment_svc.list_user_comments(
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
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


# --------------------------------- 单条评论 ---------------------------------
@comments_router.get("/{cid}", response_model=CommentOut)
def get_comment(
    cid: str,
    actor: Optional[Actor] = Depends(get_optional_actor),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    try:
        comment = comment_svc.get_comment(comment_repo=comment_repo, actor=actor, cid=cid, to_dict=True)
        return BizResponse(data=comment)
    except ResourceNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@comments_router.get("/{cid}/replies")
def list_replies(
    cid: str,
    page: int = 0,
    page_size: int = 10,
    actor: Optional[Actor] = Depends(get_optional_actor),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """某条评论的直接回复，按时间正序"""
    try:
        result = comment_svc.list_replies(
            comment_repo=comment_repo,
            actor=actor,
            cid=cid,
            page=page,
            page_size=page_size,
            to_dict=True,
        )
        return BizResponse(data=result)
    except ResourceNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@comments_router.put("/{cid}", response_model=CommentOut)
def update_comment(
    cid: str,
    payload: CommentUpdate,
    actor: Actor = Depends(get_current_actor),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """
    修改自己的评论（已删除的评论不能修改）
    """
    try:
        comment = comment_svc.update_comment(comment_repo=comment_repo, actor=actor, cid=cid, data=payload, to_dict=True)
        return BizResponse(data=comment)
    except ResourceNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except BusinessConflict as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except NotAuthenticated as e:
        return BizResponse(data=None, msg=str(e), status_code=401)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@comments_router.delete("/{cid}")
def delete_comment(
    cid: str,
    actor: Actor = Depends(get_current_actor),
    uow: IUnitOfWork = Depends(get_uow),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
    stats_repo: IPostStatsRepository = Depends(get_poststats_repo),
):
    """
    删除自己的评论（软删除），帖子评论数 -1
    """
    try:
        ok = comment_svc.delete_comment(uow=uow, comment_repo=comment_repo, stats_repo=stats_repo, actor=actor, cid=cid)
        return BizResponse(data=ok, msg="comment deleted")
    except ResourceNotFound as e:
        return BizResponse(data=False, msg=str(e), status_code=404)
    except BusinessConflict as e:
        return BizResponse(data=False, msg=str(e), status_code=400)
    except NotAuthenticated as e:
        return BizResponse(data=False, msg=str(e), status_code=401)
    except PermissionDenied as e:
        return BizResponse(data=False, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=False, msg=str(e), status_code=500)
