from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class PostCreate(BaseModel):
    """
    创建帖子：
    - 作者由登录态决定，不从请求体读取
    - status 不传时默认为 DRAFT
    - category 为分类 code，如 campus_life
    """
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    category: Optional[str] = None
    tags: Optional[str] = Field(None, max_length=255)
    cover_image: Optional[str] = Field(None, max_length=255)
    status: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, extra="forbid")


class PostUpdate(BaseModel):
    """
    更新帖子（部分更新）：只有请求里出现的字段会被修改
    """
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    tags: Optional[str] = Field(None, max_length=255)
    cover_image: Optional[str] = Field(None, max_length=255)
    status: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, extra="forbid")


class PostOut(BaseModel):
    """
    帖子详情
    """
    pid: str
    title: str
    content: str
    slug: str
    author_id: str
    author_username: Optional[str] = None
    status: str
    category: Optional[str] = None
    category_display_name: Optional[str] = None
    tags: Optional[str] = None
    cover_image: Optional[str] = None
    view_count: int = 0
    comment_count: int = 0
    is_top: bool = False
    is_recommended: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PostFeedItemOut(BaseModel):
    """
    信息流列表项：正文只给摘要
    """
    pid: str
    title: str
    summary: str
    slug: str
    author_id: str
    author_username: Optional[str] = None
    category: Optional[str] = None
    category_display_name: Optional[str] = None
    tags: Optional[str] = None
    cover_image: Optional[str] = None
    view_count: int = 0
    comment_count: int = 0
    is_top: bool = False
    is_recommended: bool = False
    created_at: Optional[datetime] = None
    published_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PostStatusUpdate(BaseModel):
    """管理员修改帖子状态"""
    status: str

    model_config = ConfigDict(extra="forbid")


class PostFlagUpdate(BaseModel):
    """管理员设置 / 取消置顶、推荐"""
    value: bool

    model_config = ConfigDict(extra="forbid")


class PostActionRequest(BaseModel):
    """
    管理员对帖子的快捷操作：
    approve / reject / set_top / remove_top / set_recommended / remove_recommended / delete
    """
    action: str
    reason: Optional[str] = Field(None, max_length=255)

    model_config = ConfigDict(extra="forbid")


class BatchPostStatusUpdate(BaseModel):
    """管理员批量修改帖子状态"""
    post_ids: List[str] = Field(..., min_length=1)
    status: str

    model_config = ConfigDict(extra="forbid")


class CategoryStatOut(BaseModel):
    """各分类下的帖子数"""
    category: str
    display_name: Optional[str] = None
    count: int
