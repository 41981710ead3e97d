from typing import Dict, List, Optional

from app.schemas.post import PostOut, CategoryStatOut
from app.schemas.common import BatchItemResult, BatchOperationOut, CodeNameOut
from app.storage.post.post_interface import IPostRepository
from app.storage.comment.comment_interface import ICommentRepository
from app.storage.unit_of_work import IUnitOfWork
from app.models.post import PostStatus, PostCategory
from app.service.post_svc import (
    resolve_status,
    resolve_category,
    status_change_fields,
    delete_post_cascade,
)

from app.core.access import Actor, require_admin
from app.core.logx import logger
from app.core.exceptions import PostNotFound, InvalidArgument
from app.core.pagination import PageResponse, page_query, validate_sort_column, DESC

# 管理端帖子列表允许的排序字段
ADMIN_SORT_COLUMNS = ("created_at", "updated_at", "view_count", "comment_count")
ADMIN_DEFAULT_SORT = "created_at"

# 管理员快捷操作
POST_ACTIONS = ("approve", "reject", "set_top", "remove_top", "set_recommended", "remove_recommended", "delete")


def _get_post_or_raise(post_repo: IPostRepository, pid: str) -> PostOut:
    post = post_repo.get_post_by_pid(pid)
    if not post:
        raise PostNotFound(pid)
    return post


def _change_status(post_repo: IPostRepository, pid: str, status: PostStatus) -> PostOut:
    current = _get_post_or_raise(post_repo, pid)
    updated = post_repo.update_post(pid, status_change_fields(current.status, status))
    if not updated:
        raise PostNotFound(pid)
    return updated


def _set_flag(post_repo: IPostRepository, pid: str, flag: str, value: bool) -> PostOut:
    _get_post_or_raise(post_repo, pid)
    updated = post_repo.update_post(pid, {flag: value})
    if not updated:
        raise PostNotFound(pid)
    return updated

#------------------------------- 查询 ------------------------------------

def list_posts(
    post_repo: IPostRepository,
    actor: Optional[Actor],
    status: Optional[str] = None,
    category: Optional[str] = None,
    page: int = 0,
    page_size: int = 10,
    sort: Optional[str] = None,
    direction: Optional[str] = None,
    to_dict: bool = True,
) -> Dict | PageResponse[PostOut]:
    """
    管理员查看所有帖子：
    - 可按状态、分类过滤（未知 code 报参数错误）
    - 排序字段走白名单，方向默认倒序
    """
    require_admin(actor)
    status_code = resolve_status(status).value if status else None
    category_code = resolve_category(category) if category else None
    sort_column = validate_sort_column(sort, ADMIN_SORT_COLUMNS, ADMIN_DEFAULT_SORT)

    query = page_query(page, page_size, sort_column, direction, default_direction=DESC)
    result = post_repo.list_posts(query, sort_column=sort_column, status=status_code, category=category_code)
    return result.model_dump() if to_dict else result


def list_posts_for_review(
    post_repo: IPostRepository,
    actor: Optional[Actor],
    page: int = 0,
    page_size: int = 10,
    to_dict: bool = True,
) -> Dict | PageResponse[PostOut]:
    """待审核队列：草稿状态的帖子，按创建时间倒序"""
    return list_posts(
        post_repo,
        actor,
        status=PostStatus.DRAFT.value,
        page=page,
        page_size=page_size,
        to_dict=to_dict,
    )


def get_post(
    post_repo: IPostRepository,
    actor: Optional[Actor],
    pid: str,
    to_dict: bool = True,
) -> Dict | PostOut:
    """管理员查看帖子详情（任意状态，不计浏览数）"""
    require_admin(actor)
    post = _get_post_or_raise(post_repo, pid)
    return post.model_dump() if to_dict else post

#------------------------------- 状态 / 置顶 / 推荐 ------------------------------------

def update_post_status(
    post_repo: IPostRepository,
    actor: Optional[Actor],
    pid: str,
    status: str,
    to_dict: bool = True,
) -> Dict | PostOut:
    """
    管理员修改帖子状态：
    - 任意状态之间可以切换
    - 从非发布状态进入 PUBLISHED 时刷新 published_at
    """
    actor = require_admin(actor)
    new_status = resolve_status(status)
    updated = _change_status(post_repo, pid, new_status)

    logger.info(f"[ADMIN] set post pid={pid} status={new_status.value} by admin={actor.uid}")
    return updated.model_dump() if to_dict else updated


def set_top(
    post_repo: IPostRepository,
    actor: Optional[Actor],
    pid: str,
    value: bool,
    to_dict: bool = True,
) -> Dict | PostOut:
    actor = require_admin(actor)
    updated = _set_flag(post_repo, pid, "is_top", value)
    logger.info(f"[ADMIN] set post pid={pid} is_top={value} by admin={actor.uid}")
    return updated.model_dump() if to_dict else updated


def set_recommended(
    post_repo: IPostRepository,
    actor: Optional[Actor],
    pid: str,
    value: bool,
    to_dict: bool = True,
) -> Dict | PostOut:
    actor = require_admin(actor)
    updated = _set_flag(post_repo, pid, "is_recommended", value)
    logger.info(f"[ADMIN] set post pid={pid} is_recommended={value} by admin={actor.uid}")
    return updated.model_dump() if to_dict else updated

#------------------------------- 删除 ------------------------------------

def delete_post(
    uow: IUnitOfWork,
    post_repo: IPostRepository,
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    pid: str,
) -> bool:
    """
    管理员删除帖子：与作者删除走同一套级联逻辑
    （评论软删除，帖子物理删除，评论数不调整）
    """
    actor = require_admin(actor)
    _get_post_or_raise(post_repo, pid)

    affected = delete_post_cascade(uow, post_repo, comment_repo, pid, actor.uid)
    logger.info(f"[ADMIN] deleted post pid={pid} with {affected} comments by admin={actor.uid}")
    return True

#------------------------------- 快捷操作 ------------------------------------

def execute_post_action(
    uow: IUnitOfWork,
    post_repo: IPostRepository,
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    pid: str,
    action: str,
    reason: Optional[str] = None,
) -> Optional[Dict]:
    """
    管理员快捷操作：
        approve            -> PUBLISHED
        reject             -> HIDDEN
        set_top / remove_top
        set_recommended / remove_recommended
        delete             -> 级联删除
    reason 只记录日志，不落库
    delete 之后帖子已不存在，返回 None
    """
    actor = require_admin(actor)
    name = (action or "").strip().lower()
    if name not in POST_ACTIONS:
        raise InvalidArgument(
            f"Unknown action: {action}. Allowed values are: {', '.join(POST_ACTIONS)}",
            field="action",
        )

    logger.info(f"[ADMIN] post action={name} pid={pid} reason={reason!r} by admin={actor.uid}")

    if name == "delete":
        delete_post(uow, post_repo, comment_repo, actor, pid)
        return None

    if name == "approve":
        updated = _change_status(post_repo, pid, PostStatus.PUBLISHED)
    elif name == "reject":
        updated = _change_status(post_repo, pid, PostStatus.HIDDEN)
    elif name in ("set_top", "remove_top"):
        updated = _set_flag(post_repo, pid, "is_top", name == "set_top")
    else:
        updated = _set_flag(post_repo, pid, "is_recommended", name == "set_recommended")

    return updated.model_dump()

#------------------------------- 批量 ------------------------------------

def batch_update_post_status(
    uow: IUnitOfWork,
    post_repo: IPostRepository,
    actor: Optional[Actor],
    post_ids: List[str],
    status: str,
    to_dict: bool = True,
) -> Dict | BatchOperationOut:
    """
    批量修改帖子状态：
    - 每条单独一个事务，某条失败（帖子不存在、数据库报错）只回滚该条，不影响其他条目
    - 返回每条的处理结果
    """
    actor = require_admin(actor)
    new_status = resolve_status(status)

    items: List[BatchItemResult] = []
    for pid in post_ids:
        try:
            with uow.atomic():
                _change_status(post_repo, pid, new_status)
            items.append(BatchItemResult(id=pid, ok=True))
        except PostNotFound as e:
            logger.warning(f"[ADMIN] batch post status skipped pid={pid}: {e.message}")
            items.append(BatchItemResult(id=pid, ok=False, error=e.message))
        except Exception as e:
            logger.exception(f"[ADMIN] batch post status failed pid={pid}: {e}")
            items.append(BatchItemResult(id=pid, ok=False, error=str(e)))

    result = BatchOperationOut.from_items(items)
    logger.info(
        f"[ADMIN] batch set post status={new_status.value} total={result.total} "
        f"success={result.success_count} failure={result.failure_count} by admin={actor.uid}"
    )
    return result.model_dump() if to_dict else result

#------------------------------- 统计 / 字典 ------------------------------------

def category_stats(
    post_repo: IPostRepository,
    actor: Optional[Actor],
    status: Optional[str] = None,
    to_dict: bool = True,
) -> List:
    """各分类的帖子数，未设置分类的帖子不计入"""
    require_admin(actor)
    status_code = resolve_status(status).value if status else None

    items = []
    for code, count in post_repo.count_by_category(status=status_code):
        if code is None:
            continue
        category = PostCategory.from_code(code)
        items.append(CategoryStatOut(
            category=code,
            display_name=category.display_name if category else None,
            count=count,
        ))

    return [i.model_dump() for i in items] if to_dict else items


def list_statuses(actor: Optional[Actor], to_dict: bool = True) -> List:
    """所有帖子状态（code + 显示名）"""
    require_admin(actor)
    items = [CodeNameOut(code=s.code, display_name=s.display_name) for s in PostStatus]
    return [i.model_dump() for i in items] if to_dict else items


def list_categories(actor: Optional[Actor], to_dict: bool = True) -> List:
    require_admin(actor)
    items = [CodeNameOut(code=c.code, display_name=c.display_name) for c in PostCategory]
    return [i.model_dump() for i in items] if to_dict else items
