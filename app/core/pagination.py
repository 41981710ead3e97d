import math
from typing import Generic, Iterable, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from app.core.config import settings
from app.core.exceptions import InvalidArgument

T = TypeVar("T")

ASC = "ASC"
DESC = "DESC"


class PageQuery(BaseModel):
    """
    规范化后的分页查询描述：
    - page 从 0 开始，不小于 0
    - size 在 [1, MAX_PAGE_SIZE] 之间
    - direction 只会是 ASC / DESC
    """
    page: int = 0
    size: int = settings.DEFAULT_PAGE_SIZE
    sort: Optional[str] = None
    direction: str = ASC

    @property
    def offset(self) -> int:
        # 不按总数截断，越界页由查询返回空列表
        return self.page * self.size

    @property
    def limit(self) -> int:
        return self.size

    @property
    def descending(self) -> bool:
        return self.direction == DESC


def normalize_direction(direction: Optional[str], default: str = ASC) -> str:
    """只有忽略大小写等于 desc 时才是 DESC，其余一律 ASC；未传时用调用方默认值"""
    if direction is None or direction.strip() == "":
        return default
    return DESC if direction.strip().upper() == DESC else ASC


def page_query(
    page: Optional[int] = None,
    size: Optional[int] = None,
    sort: Optional[str] = None,
    direction: Optional[str] = None,
    default_direction: str = ASC,
) -> PageQuery:
    """把前端传来的 page/size/sort/direction 规范化成 PageQuery"""
    page = 0 if page is None else max(page, 0)
    if size is None or size < 1:
        size = settings.DEFAULT_PAGE_SIZE if size is None else 1
    size = min(size, settings.MAX_PAGE_SIZE)

    return PageQuery(
        page=page,
        size=size,
        sort=sort,
        direction=normalize_direction(direction, default_direction),
    )


def validate_sort_column(sort: Optional[str], allowed: Iterable[str], default: str) -> str:
    """
    排序字段白名单校验：
    - 未传时返回 default
    - 不在白名单里直接报错，不静默忽略
    """
    allowed = list(allowed)
    if sort is None or sort.strip() == "":
        return default
    if sort not in allowed:
        raise InvalidArgument(
            f"Invalid sort parameter. Allowed values are: {', '.join(allowed)}",
            field="sort",
        )
    return sort


class PageResponse(BaseModel, Generic[T]):
    """
    统一分页返回结构
    - total_pages = ceil(total_elements / size)
    - total_elements 为 0 时 total_pages 为 0，first / last 都为 True
    """
    content: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int
    first: bool
    last: bool
    has_next: bool
    has_previous: bool

    model_config = ConfigDict(from_attributes=True)


def create_page_response(content: List[T], page: int, size: int, total_elements: int) -> PageResponse[T]:
    total_pages = math.ceil(total_elements / size) if size > 0 else 0
    return PageResponse(
        content=content,
        page=page,
        size=size,
        total_elements=total_elements,
        total_pages=total_pages,
        first=page == 0,
        last=page >= total_pages - 1,
        has_next=page < total_pages - 1,
        has_previous=page > 0,
    )
