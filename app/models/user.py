from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP, Text, UniqueConstraint, Index
import uuid
from enum import Enum
from typing import Optional
from app.models.base import Base
from app.core.time import now_utc8
from app.core.exceptions import InvalidArgument

# 用户角色，数据库里按字符串 code 存储
class UserRole(str, Enum):
    USER = "USER"             # 普通用户
    MODERATOR = "MODERATOR"   # 审核员
    ADMIN = "ADMIN"           # 管理员
    GUEST = "GUEST"           # 游客

    @property
    def code(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return _ROLE_NAMES[self]

    @classmethod
    def from_code(cls, code: Optional[str]) -> "UserRole":
        """忽略大小写查找角色，找不到直接报错（角色决定权限，不能静默兜底）"""
        if code is None:
            raise InvalidArgument("Unknown user role code: None", field="role")
        try:
            return cls(code.strip().upper())
        except ValueError:
            raise InvalidArgument(f"Unknown user role code: {code}", field="role")

    def is_admin(self) -> bool:
        return self is UserRole.ADMIN

    def is_moderator(self) -> bool:
        return self in (UserRole.MODERATOR, UserRole.ADMIN)

    def is_user(self) -> bool:
        return self is UserRole.USER


_ROLE_NAMES = {
    UserRole.USER: "普通用户",
    UserRole.MODERATOR: "审核员",
    UserRole.ADMIN: "管理员",
    UserRole.GUEST: "游客",
}


class User(Base):
    """ 用户模型，对应数据库中的 users 表。

        CREATE TABLE IF NOT EXISTS users (
            _id INT AUTO_INCREMENT PRIMARY KEY,        -- 系统主键 ID
            uid VARCHAR(36) UNIQUE,                    -- 用户的业务主键（UUID）
            username VARCHAR(50) UNIQUE NOT NULL,      -- 用户名
            email VARCHAR(100) UNIQUE NOT NULL,        -- 邮箱
            password VARCHAR(255) NOT NULL,            -- 密码哈希
            role VARCHAR(20) DEFAULT 'USER',           -- 角色（USER / MODERATOR / ADMIN / GUEST）
            avatar_url VARCHAR(255),                   -- 用户头像 URL
            bio TEXT,                                  -- 用户简介
            is_enabled BOOLEAN DEFAULT TRUE,           -- 是否启用（用户注销 / 管理员禁用时为 FALSE）
            is_locked BOOLEAN DEFAULT FALSE,           -- 是否锁定

            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,    -- 创建时间
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP     -- 更新时间
        );
    """

    __tablename__ = "users"
    # 系统主键：自增
    _id = Column(Integer, primary_key=True, autoincrement=True)  # 系统主键ID，系统用，不对外暴露
    # 业务主键：UUID，唯一且不自增
    uid = Column(String(36), unique=True, default=lambda: str(uuid.uuid4()))  # 用户的业务主键，UUID形式
    username = Column(String(50), nullable=False)  # 用户名（唯一）
    email = Column(String(100), nullable=False)  # 用户邮箱（唯一）
    password = Column(String(255), nullable=False)  # 密码哈希
    role = Column(String(20), nullable=False, default=UserRole.USER.value)  # 用户角色 code
    avatar_url = Column(String(255), nullable=True)  # 用户头像
    bio = Column(Text, nullable=True)  # 用户简介
    is_enabled = Column(Boolean, nullable=False, default=True)  # 是否启用
    is_locked = Column(Boolean, nullable=False, default=False)  # 是否锁定
    created_at = Column(TIMESTAMP(timezone=True), default=now_utc8)  # 创建时间
    updated_at = Column(TIMESTAMP(timezone=True), default=now_utc8, onupdate=now_utc8)  # 更新时间

    # 用户删除时不级联删除其帖子和评论，因此帖子/评论一侧只按 uid 引用，不建外键

    __table_args__ = (
        UniqueConstraint('uid', name='unique_uid'),
        UniqueConstraint('username', name='unique_username'),
        UniqueConstraint('email', name='unique_email'),
        Index("idx_users_role", "role"),
        Index("idx_users_enabled", "is_enabled"),
    )
