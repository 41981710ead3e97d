from typing import Optional, List, Dict
from pydantic import BaseModel, EmailStr, ConfigDict, Field
from datetime import datetime
from app.models.user import UserRole

class UserCreate(BaseModel):
    """
    注册用户（账号密码注册），角色固定为普通用户
    """
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)

    model_config = ConfigDict(from_attributes=True, extra="forbid")

class UserLogin(BaseModel):
    """用户名 + 密码登录"""
    username: str
    password: str

    model_config = ConfigDict(extra="forbid")

class UserOut(BaseModel):
    """
    对外返回的用户基础信息（不包含敏感字段，如 password、email）
    """
    uid: str                                     # 业务主键（UUID 字符串）
    username: str                                # 用户名
    avatar_url: Optional[str] = None             # 头像 URL
    bio: Optional[str] = None                    # 简介
    role: UserRole = UserRole.USER               # 角色
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class UserProfileOut(UserOut):
    """
    本人 / 管理员能看到的完整资料（不含密码）
    """
    email: str
    is_enabled: bool = True
    is_locked: bool = False
    updated_at: Optional[datetime] = None

class UserAllOut(UserProfileOut):
    """
    仓库层内部使用，包含密码哈希，不直接返回给前端
    """
    password: str

class TokenOut(BaseModel):
    """登录成功返回的 token"""
    access_token: str
    token_type: str = "bearer"
    user: UserProfileOut


class UserUpdate(BaseModel):
    """
    用户更新自己的资料（部分字段可选）
    - avatar_url / bio 传空字符串表示清空
    - 角色、启用状态只能由管理员接口修改
    """
    email: Optional[EmailStr] = None
    avatar_url: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = Field(None, max_length=500)

    model_config = ConfigDict(from_attributes=True, extra="forbid")


class UserPasswordUpdate(BaseModel):
    """
    修改密码（单独接口，避免与普通更新混用）
    """
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=128)
    confirm_password: str

    model_config = ConfigDict(from_attributes=True, extra="forbid")


class UserDeleteRequest(BaseModel):
    """注销账号需要再次输入密码"""
    password: str

    model_config = ConfigDict(extra="forbid")


class UserStatusUpdate(BaseModel):
    """管理员启用 / 禁用用户"""
    enabled: bool

    model_config = ConfigDict(extra="forbid")


class BatchUserStatusUpdate(BaseModel):
    """管理员批量启用 / 禁用用户"""
    user_ids: List[str] = Field(..., min_length=1)
    enabled: bool

    model_config = ConfigDict(extra="forbid")


class UserEmotionStatsOut(BaseModel):
    """
    用户的情感统计：帖子、评论各自按情感标签计数，以及合计
    """
    user_id: str
    post_stats: Dict[str, int]
    comment_stats: Dict[str, int]
    total_stats: Dict[str, int]
