from typing import Optional, Protocol, Dict, Any

from app.core.pagination import PageQuery, PageResponse
from app.schemas.user import (
    UserCreate,
    UserAllOut,
    UserProfileOut,
)

class IUserRepository(Protocol):
    """
    用户仓库接口协议（数据层抽象接口）
    业务层依赖本接口，而不是具体实现，方便后续替换为不同数据源（MySQL/PG/Mongo 等）
    """

    def get_user_by_uid(self, uid: str) -> Optional[UserAllOut]:
        """根据业务主键 uid 查询用户（包含已禁用用户）"""
        ...

    def get_user_by_username(self, username: str) -> Optional[UserAllOut]:
        """根据用户名查询用户（登录用）"""
        ...

    def exists_by_username(self, username: str) -> bool:
        ...

    def exists_by_email(self, email: str) -> bool:
        ...

    def create_user(self, user_data: UserCreate) -> UserAllOut:
        """
        创建用户
        注意：此处假定 user_data.password 已经是哈希后的密码（业务层负责加密）
        """
        ...

    def update_profile(self, uid: str, fields: Dict[str, Any]) -> Optional[UserAllOut]:
        """
        更新资料（email / avatar_url / bio），fields 中值为 None 表示清空
        返回更新后的用户信息，未找到返回 None
        """
        ...

    def update_password(self, uid: str, new_password_hash: str) -> bool:
        """修改密码（new_password_hash 已在业务层加密）"""
        ...

    def set_enabled(self, uid: str, enabled: bool) -> bool:
        """启用 / 禁用用户，未找到返回 False"""
        ...

    def hard_delete_user(self, uid: str) -> bool:
        """物理删除用户，未找到返回 False"""
        ...

    def list_users(
        self,
        query: PageQuery,
        sort_column: str,
        enabled: Optional[bool] = None,
        role: Optional[str] = None,
    ) -> PageResponse[UserProfileOut]:
        """
        管理端分页查询用户：
        - enabled / role 为空表示不过滤
        - sort_column 已经过白名单校验
        """
        ...
