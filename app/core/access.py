from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.models.user import UserRole
from app.core.exceptions import NotAuthenticated, PermissionDenied


class Actor(BaseModel):
    """
    当前操作者，由认证依赖解析 token 得到，显式传给每个业务函数
    """
    uid: str
    username: str
    role: UserRole = UserRole.USER
    is_enabled: bool = True
    is_locked: bool = False

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_admin(self) -> bool:
        return self.role.is_admin()


def require_authenticated(actor: Optional[Actor]) -> Actor:
    """未登录直接拒绝（401）"""
    if actor is None:
        raise NotAuthenticated()
    return actor


def require_admin(actor: Optional[Actor]) -> Actor:
    """管理端接口：必须是 ADMIN"""
    actor = require_authenticated(actor)
    if not actor.is_admin:
        raise PermissionDenied("Admin role required.")
    return actor


def require_owner(actor: Optional[Actor], owner_id: str, message: str = "You can only modify your own content.") -> Actor:
    """自助操作：只能操作自己的帖子 / 评论"""
    actor = require_authenticated(actor)
    if actor.uid != owner_id:
        raise PermissionDenied(message)
    return actor


def forbid_self_target(actor: Actor, target_uid: str, message: str) -> None:
    """管理员不能对自己的账号执行禁用 / 删除，与角色无关"""
    if actor.uid == target_uid:
        raise PermissionDenied(message)
