from typing import Optional

from fastapi import APIRouter, Depends

from app.schemas.post import PostCreate, PostUpdate, PostOut
from app.core.access import Actor
from app.core.auth import get_current_actor
from app.core.biz_response import BizResponse
from app.service import post_svc

from app.storage.database import (
    get_post_repo,
    get_poststats_repo,
    get_comment_repo,
    get_uow,
)
from app.storage.post.post_interface import IPostRepository
from app.storage.post_stats.post_stats_interface import IPostStatsRepository
from app.storage.comment.comment_interface import ICommentRepository
from app.storage.unit_of_work import IUnitOfWork

from app.core.exceptions import (
    PostNotFound,
    PostAlreadyPublished,
    NotAuthenticated,
    PermissionDenied,
    InvalidArgument,
)
from app.core.logx import logger

posts_router = APIRouter(prefix="/posts", tags=["posts"])


# --------------------------------- 创建帖子 ---------------------------------
@posts_router.post("/", response_model=PostOut)
def create_post(
    payload: PostCreate,
    actor: Actor = Depends(get_current_actor),
    post_repo: IPostRepository = Depends(get_post_repo),
):
    """
    创建帖子：
    - 作者为当前登录用户
    - 同时初始化 post_stats 统计记录
    """
    try:
        post = post_svc.create_post(post_repo=post_repo, actor=actor, data=payload, to_dict=True)
        return BizResponse(data=post, status_code=201)
    except InvalidArgument as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except NotAuthenticated as e:
        return BizResponse(data=None, msg=str(e), status_code=401)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


# --------------------------------- 公开列表 ---------------------------------
@posts_router.get("/feed")
def get_feed(
    page: int = 0,
    page_size: int = 10,
    sort: Optional[str] = None,
    direction: Optional[str] = None,
    post_repo: IPostRepository = Depends(get_post_repo),
):
    """
    信息流：已发布帖子，默认按发布时间倒序
    sort 可选 published_at / created_at / view_count / comment_count
    """
    try:
        result = post_svc.get_feed(
            post_repo=post_repo,
            page=page,
            page_size=page_size,
            sort=sort,
            direction=direction,
            to_dict=True,
        )
        return BizResponse(data=result)
    except InvalidArgument as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@posts_router.get("/me")
def list_my_posts(
    page: int = 0,
    page_size: int = 10,
    actor: Actor = Depends(get_current_actor),
    post_repo: IPostRepository = Depends(get_post_repo),
):
    """当前用户自己的帖子（包括草稿）"""
    try:
        result = post_svc.list_my_posts(post_repo=post_repo, actor=actor, page=page, page_size=page_size, to_dict=True)
        return BizResponse(data=result)
    except NotAuthenticated as e:
        return BizResponse(data=None, msg=str(e), status_code=401)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@posts_router.get("/categories")
def list_categories():
    """所有帖子分类"""
    return BizResponse(data=post_svc.list_categories(to_dict=True))


@posts_router.get("/search")
def search_posts(
    keyword: str = "",
    page: int = 0,
    page_size: int = 10,
    post_repo: IPostRepository = Depends(get_post_repo),
):
    """按关键字搜索标题和正文"""
    try:
        result = post_svc.search_posts(post_repo=post_repo, keyword=keyword, page=page, page_size=page_size, to_dict=True)
        return BizResponse(data=result)
    except InvalidArgument as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@posts_router.get("/top")
def get_top_posts(limit: Optional[int] = None, post_repo: IPostRepository = Depends(get_post_repo)):
    """置顶帖子"""
    try:
        return BizResponse(data=post_svc.get_top_posts(post_repo=post_repo, limit=limit, to_dict=True))
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@posts_router.get("/recommended")
def get_recommended_posts(limit: Optional[int] = None, post_repo: IPostRepository = Depends(get_post_repo)):
    """推荐帖子"""
    try:
        return BizResponse(data=post_svc.get_recommended_posts(post_repo=post_repo, limit=limit, to_dict=True))
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@posts_router.get("/category/{category}")
def list_posts_by_category(
    category: str,
    page: int = 0,
    page_size: int = 10,
    post_repo: IPostRepository = Depends(get_post_repo),
):
    """某个分类下已发布的帖子"""
    try:
        result = post_svc.list_posts_by_category(
            post_repo=post_repo,
            category=category,
            page=page,
            page_size=page_size,
            to_dict=True,
        )
        return BizResponse(data=result)
    except InvalidArgument as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


# --------------------------------- 单个帖子 ---------------------------------
@posts_router.get("/slug/{slug}", response_model=PostOut)
def get_post_by_slug(
    slug: str,
    post_repo: IPostRepository = Depends(get_post_repo),
    stats_repo: IPostStatsRepository = Depends(get_poststats_repo),
):
    """
    通过 slug 查看帖子，已发布的帖子浏览数 +1
    """
    try:
        post = post_svc.get_post_by_slug(post_repo=post_repo, stats_repo=stats_repo, slug=slug, to_dict=True)
        return BizResponse(data=post)
    except PostNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@posts_router.get("/{pid}", response_model=PostOut)
def get_post(pid: str, post_repo: IPostRepository = Depends(get_post_repo)):
    """
    通过帖子 ID 获取帖子详情
    """
    try:
        post = post_svc.get_post_by_pid(post_repo=post_repo, pid=pid, to_dict=True)
        return BizResponse(data=post)
    except PostNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@posts_router.put("/{pid}", response_model=PostOut)
def update_post(
    pid: str,
    payload: PostUpdate,
    actor: Actor = Depends(get_current_actor),
    post_repo: IPostRepository = Depends(get_post_repo),
):
    """
    作者更新帖子，只修改请求里出现的字段
    """
    try:
        post = post_svc.update_post(post_repo=post_repo, actor=actor, pid=pid, data=payload, to_dict=True)
        return BizResponse(data=post)
    except PostNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except InvalidArgument as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except NotAuthenticated as e:
        return BizResponse(data=None, msg=str(e), status_code=401)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@posts_router.put("/{pid}/publish", response_model=PostOut)
def publish_post(
    pid: str,
    actor: Actor = Depends(get_current_actor),
    post_repo: IPostRepository = Depends(get_post_repo),
):
    """
    发布草稿 / 隐藏的帖子
    """
    try:
        post = post_svc.publish_post(post_repo=post_repo, actor=actor, pid=pid, to_dict=True)
        return BizResponse(data=post)
    except PostNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except PostAlreadyPublished as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except NotAuthenticated as e:
        return BizResponse(data=None, msg=str(e), status_code=401)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@posts_router.delete("/{pid}")
def delete_post(
    pid: str,
    actor: Actor = Depends(get_current_actor),
    uow: IUnitOfWork = Depends(get_uow),
    post_repo: IPostRepository = Depends(get_post_repo),
    comment_repo: ICommentRepository = Depends(get_comment_repo),
):
    """
    作者删除帖子：
    - 帖子下的评论全部软删除
    - 帖子和统计记录物理删除
    """
    try:
        ok = post_svc.delete_post(uow=uow, post_repo=post_repo, comment_repo=comment_repo, actor=actor, pid=pid)
        return BizResponse(data=ok, msg="post deleted")
    except PostNotFound as e:
        return BizResponse(data=False, msg=str(e), status_code=404)
    except NotAuthenticated as e:
        return BizResponse(data=False, msg=str(e), status_code=401)
    except PermissionDenied as e:
        return BizResponse(data=False, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=False, msg=str(e), status_code=500)
