from typing import Dict, List, Optional, Any

from app.schemas.post import (
    PostCreate,
    PostUpdate,
    PostOut,
    PostFeedItemOut,
)
from app.schemas.common import CodeNameOut
from app.storage.post.post_interface import IPostRepository
from app.storage.post_stats.post_stats_interface import IPostStatsRepository
from app.storage.comment.comment_interface import ICommentRepository
from app.storage.unit_of_work import IUnitOfWork
from app.models.post import PostStatus, PostCategory

from app.core.access import Actor, require_authenticated, require_owner
from app.core.config import settings
from app.core.logx import logger
from app.core.exceptions import PostNotFound, PostAlreadyPublished, InvalidArgument
from app.core.pagination import PageResponse, page_query, validate_sort_column, create_page_response, DESC
from app.core.slug import generate_unique_slug
from app.core.time import now_utc8

# 信息流允许的排序字段
FEED_SORT_COLUMNS = ("published_at", "created_at", "view_count", "comment_count")
FEED_DEFAULT_SORT = "published_at"
# 摘要长度
SUMMARY_LENGTH = 150
# 置顶 / 推荐列表默认条数
DEFAULT_FLAGGED_LIMIT = 5

# 帖子删除时，级联软删除评论记录的原因
POST_DELETED_REASON = "post deleted"

#---------------------------------------- 公共工具 -----------------------------------------

def resolve_status(code: Optional[str]) -> PostStatus:
    """状态 code -> 枚举，未知 code 报参数错误"""
    status = PostStatus.from_code(code)
    if status is None:
        raise InvalidArgument(f"Invalid post status: {code}", field="status")
    return status


def resolve_category(code: Optional[str]) -> Optional[str]:
    """分类 code 校验，None 表示不设置分类"""
    if code is None:
        return None
    category = PostCategory.from_code(code)
    if category is None:
        raise InvalidArgument(f"Invalid post category: {code}", field="category")
    return category.code


def status_change_fields(current_status: Optional[str], new_status: PostStatus) -> Dict[str, Any]:
    """
    状态流转：任意状态之间都可以切换
    只有从非 PUBLISHED 进入 PUBLISHED 时才写 published_at，其余切换不动它
    """
    fields: Dict[str, Any] = {"status": new_status.value}
    if new_status is PostStatus.PUBLISHED and current_status != PostStatus.PUBLISHED.value:
        fields["published_at"] = now_utc8()
    return fields


def to_feed_item(post: PostOut) -> PostFeedItemOut:
    content = post.content or ""
    summary = content[:SUMMARY_LENGTH] + "..." if len(content) > SUMMARY_LENGTH else content
    return PostFeedItemOut(summary=summary, **post.model_dump(exclude={"content", "status", "updated_at"}))


def _to_feed_page(page: PageResponse) -> PageResponse:
    items = [to_feed_item(p) for p in page.content]
    return create_page_response(items, page.page, page.size, page.total_elements)


def _clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return DEFAULT_FLAGGED_LIMIT
    return max(1, min(limit, settings.MAX_PAGE_SIZE))


def _get_post_or_raise(post_repo: IPostRepository, pid: str) -> PostOut:
    post = post_repo.get_post_by_pid(pid)
    if not post:
        raise PostNotFound(pid)
    return post

#---------------------------------------- 增 -----------------------------------------

def create_post(
    post_repo: IPostRepository,
    actor: Optional[Actor],
    data: PostCreate,
    to_dict: bool = True,
) -> Dict | PostOut:
    """
    创建帖子：
    1. 作者为当前登录用户
    2. 状态默认 DRAFT；直接以 PUBLISHED 创建时写 published_at
    3. slug 由标题生成，带时间戳后缀保证唯一
    4. 同时初始化统计记录（浏览数、评论数为 0）
    """
    actor = require_authenticated(actor)

    status = resolve_status(data.status) if data.status is not None else PostStatus.DRAFT
    fields: Dict[str, Any] = {
        "title": data.title,
        "content": data.content,
        "category": resolve_category(data.category),
        "tags": data.tags,
        "cover_image": data.cover_image,
        "author_id": actor.uid,
        "slug": generate_unique_slug(data.title),
        "is_top": False,
        "is_recommended": False,
    }
    fields.update(status_change_fields(None, status))

    post = post_repo.create_post(fields)
    logger.info(f"Created post pid={post.pid} slug={post.slug} status={post.status} by author={actor.uid}")

    return post.model_dump() if to_dict else post

#---------------------------------------- 查 -----------------------------------------

def get_post_by_pid(
    post_repo: IPostRepository,
    pid: str,
    to_dict: bool = True,
) -> Dict | PostOut:
    """根据 pid 获取帖子详情（不计浏览数）"""
    post = _get_post_or_raise(post_repo, pid)
    return post.model_dump() if to_dict else post


def get_post_by_slug(
    post_repo: IPostRepository,
    stats_repo: IPostStatsRepository,
    slug: str,
    to_dict: bool = True,
) -> Dict | PostOut:
    """
    通过 slug 查看帖子（公开接口）：
    - 已发布的帖子浏览数 +1
    - 未发布的帖子照常返回，但不计浏览数
    """
    post = post_repo.get_post_by_slug(slug)
    if not post:
        raise PostNotFound(slug, field="slug")

    if post.status == PostStatus.PUBLISHED.value:
        stats = stats_repo.update_views(post.pid, step=1)
        if stats is not None:
            post = post.model_copy(update={"view_count": stats.view_count})

    return post.model_dump() if to_dict else post


def list_my_posts(
    post_repo: IPostRepository,
    actor: Optional[Actor],
    page: int = 0,
    page_size: int = 10,
    to_dict: bool = True,
) -> Dict | PageResponse[PostOut]:
    """当前用户自己的帖子（所有状态），新的在前"""
    actor = require_authenticated(actor)
    query = page_query(page, page_size, default_direction=DESC)
    result = post_repo.list_posts(query, sort_column="created_at", author_id=actor.uid)
    return result.model_dump() if to_dict else result


def get_feed(
    post_repo: IPostRepository,
    page: int = 0,
    page_size: int = 10,
    sort: Optional[str] = None,
    direction: Optional[str] = None,
    to_dict: bool = True,
) -> Dict | PageResponse[PostFeedItemOut]:
    """
    信息流：只包含已发布的帖子，默认按发布时间倒序
    """
    sort_column = validate_sort_column(sort, FEED_SORT_COLUMNS, FEED_DEFAULT_SORT)
    query = page_query(page, page_size, sort_column, direction, default_direction=DESC)
    result = _to_feed_page(
        post_repo.list_posts(query, sort_column=sort_column, status=PostStatus.PUBLISHED.value)
    )
    return result.model_dump() if to_dict else result


def list_posts_by_category(
    post_repo: IPostRepository,
    category: str,
    page: int = 0,
    page_size: int = 10,
    to_dict: bool = True,
) -> Dict | PageResponse[PostFeedItemOut]:
    """某分类下已发布的帖子"""
    code = resolve_category(category)
    query = page_query(page, page_size, default_direction=DESC)
    result = _to_feed_page(
        post_repo.list_posts(query, sort_column=FEED_DEFAULT_SORT, status=PostStatus.PUBLISHED.value, category=code)
    )
    return result.model_dump() if to_dict else result


def search_posts(
    post_repo: IPostRepository,
    keyword: str,
    page: int = 0,
    page_size: int = 10,
    to_dict: bool = True,
) -> Dict | PageResponse[PostFeedItemOut]:
    """按关键字搜索已发布帖子的标题和正文"""
    keyword = (keyword or "").strip()
    if not keyword:
        raise InvalidArgument("keyword must not be empty", field="keyword")
    query = page_query(page, page_size, default_direction=DESC)
    result = _to_feed_page(
        post_repo.list_posts(query, sort_column=FEED_DEFAULT_SORT, status=PostStatus.PUBLISHED.value, keyword=keyword)
    )
    return result.model_dump() if to_dict else result


def get_top_posts(post_repo: IPostRepository, limit: Optional[int] = None, to_dict: bool = True) -> List:
    """置顶帖子（不分页）"""
    items = [to_feed_item(p) for p in post_repo.list_flagged("is_top", _clamp_limit(limit))]
    return [i.model_dump() for i in items] if to_dict else items


def get_recommended_posts(post_repo: IPostRepository, limit: Optional[int] = None, to_dict: bool = True) -> List:
    """推荐帖子（不分页）"""
    items = [to_feed_item(p) for p in post_repo.list_flagged("is_recommended", _clamp_limit(limit))]
    return [i.model_dump() for i in items] if to_dict else items


def list_categories(to_dict: bool = True) -> List:
    """所有分类（code + 显示名）"""
    items = [CodeNameOut(code=c.code, display_name=c.display_name) for c in PostCategory]
    return [i.model_dump() for i in items] if to_dict else items

#---------------------------------------- 改 -----------------------------------------

def update_post(
    post_repo: IPostRepository,
    actor: Optional[Actor],
    pid: str,
    data: PostUpdate,
    to_dict: bool = True,
) -> Dict | PostOut:
    """
    作者更新帖子（部分更新）：
    1. 只能改自己的帖子
    2. 标题变化时重新生成 slug
    3. 状态进入 PUBLISHED 时按规则写 published_at
    """
    current = _get_post_or_raise(post_repo, pid)
    require_owner(actor, current.author_id, "You can only edit your own posts")

    changes = data.model_dump(exclude_none=True)
    fields: Dict[str, Any] = {}

    if "title" in changes and changes["title"] != current.title:
        fields["title"] = changes["title"]
        fields["slug"] = generate_unique_slug(changes["title"])
    if "content" in changes:
        fields["content"] = changes["content"]
    if "category" in changes:
        fields["category"] = resolve_category(changes["category"])
    if "tags" in changes:
        fields["tags"] = changes["tags"]
    if "cover_image" in changes:
        fields["cover_image"] = changes["cover_image"]
    if "status" in changes:
        fields.update(status_change_fields(current.status, resolve_status(changes["status"])))

    updated = post_repo.update_post(pid, fields)
    if not updated:
        raise PostNotFound(pid)

    logger.info(f"Updated post pid={pid} fields={sorted(fields)} by author={current.author_id}")
    return updated.model_dump() if to_dict else updated


def publish_post(
    post_repo: IPostRepository,
    actor: Optional[Actor],
    pid: str,
    to_dict: bool = True,
) -> Dict | PostOut:
    """
    作者发布帖子，已发布时报业务冲突
    """
    current = _get_post_or_raise(post_repo, pid)
    require_owner(actor, current.author_id, "You can only publish your own posts")

    if current.status == PostStatus.PUBLISHED.value:
        raise PostAlreadyPublished(pid)

    updated = post_repo.update_post(pid, status_change_fields(current.status, PostStatus.PUBLISHED))
    if not updated:
        raise PostNotFound(pid)

    logger.info(f"Published post pid={pid} ({current.status} -> PUBLISHED)")
    return updated.model_dump() if to_dict else updated

#---------------------------------------- 删 -----------------------------------------

def delete_post_cascade(
    uow: IUnitOfWork,
    post_repo: IPostRepository,
    comment_repo: ICommentRepository,
    pid: str,
    deleted_by: Optional[str],
) -> int:
    """
    删除帖子（作者删除和管理员删除共用）：
    1. 先把帖子下未删除的评论全部软删除（不调整评论数，帖子随后就被删掉）
    2. 再物理删除帖子和它的统计记录
    两步在同一个事务里完成，返回被软删除的评论数
    """
    with uow.atomic():
        affected = comment_repo.soft_delete_by_post(pid, deleted_by, POST_DELETED_REASON)
        if not post_repo.delete_post(pid):
            raise PostNotFound(pid)

    logger.info(f"Deleted post pid={pid} by={deleted_by}, soft deleted {affected} comments")
    return affected


def delete_post(
    uow: IUnitOfWork,
    post_repo: IPostRepository,
    comment_repo: ICommentRepository,
    actor: Optional[Actor],
    pid: str,
) -> bool:
    """作者删除自己的帖子"""
    current = _get_post_or_raise(post_repo, pid)
    actor = require_owner(actor, current.author_id, "You can only delete your own posts")

    delete_post_cascade(uow, post_repo, comment_repo, pid, actor.uid)
    return True
