from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, List


class CommentCreate(BaseModel):
    """
    创建评论：
    - parent_comment_id 为空表示顶级评论，否则是回复
    - 作者由登录态决定
    """
    post_id: str
    content: str = Field(..., min_length=1, max_length=1000)
    parent_comment_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, extra="forbid")


class CommentUpdate(BaseModel):
    """作者修改评论内容"""
    content: str = Field(..., min_length=1, max_length=1000)

    model_config = ConfigDict(from_attributes=True, extra="forbid")


class CommentOut(BaseModel):
    """
    前台展示用的评论：
    - content 为展示内容，已删除 / 已隐藏时是占位文本
    - parent_content_preview 为父评论的展示内容预览（父评论被物理删除时为空）
    - can_edit 按当前查看者计算
    - replies 只在顶级评论列表里填充前几条回复
    """
    cid: str
    content: str
    post_id: str
    post_title: Optional[str] = None
    user_id: str
    username: Optional[str] = None
    user_avatar_url: Optional[str] = None
    parent_comment_id: Optional[str] = None
    parent_content_preview: Optional[str] = None
    is_deleted: bool = False
    is_active: bool = True
    is_edited: bool = False
    can_edit: bool = False
    reply_count: int = 0
    replies: List["CommentOut"] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


CommentOut.model_rebuild()


class CommentAdminOut(BaseModel):
    """
    管理端评论视图：包含原文和删除 / 隐藏信息
    """
    cid: str
    content: str
    post_id: str
    post_title: Optional[str] = None
    user_id: str
    username: Optional[str] = None
    parent_comment_id: Optional[str] = None
    is_deleted: bool = False
    is_active: bool = True
    delete_reason: Optional[str] = None
    deleted_by: Optional[str] = None
    deleted_at: Optional[datetime] = None
    status_description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CommentModerationRequest(BaseModel):
    """管理员删除 / 隐藏评论时可附带原因"""
    reason: Optional[str] = Field(None, max_length=255)

    model_config = ConfigDict(extra="forbid")


class BatchCommentIds(BaseModel):
    """管理员批量删除评论"""
    comment_ids: List[str] = Field(..., min_length=1)
    reason: Optional[str] = Field(None, max_length=255)

    model_config = ConfigDict(extra="forbid")
