"""
认证依赖：从 Authorization: Bearer {token} 解析出当前操作者
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from app.core.access import Actor
from app.core.security import decode_access_token
from app.storage.database import get_user_repo
from app.storage.user.user_interface import IUserRepository


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_optional_actor(
    authorization: Optional[str] = Header(None),
    user_repo: IUserRepository = Depends(get_user_repo),
) -> Optional[Actor]:
    """
    可选登录：
    - 没带 Authorization 头返回 None（匿名访问）
    - 带了但 token 无效 / 用户不存在，返回 401
    - 用户已禁用或锁定，返回 403
    """
    if not authorization or not authorization.strip():
        return None

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise _unauthorized("认证格式错误，应为: Bearer {token}")

    payload = decode_access_token(parts[1])
    if not payload or not payload.get("sub"):
        raise _unauthorized("Token无效或已过期")

    user = user_repo.get_user_by_uid(payload["sub"])
    if not user:
        raise _unauthorized("Token对应的用户不存在")
    if not user.is_enabled or user.is_locked:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="账号已被禁用或锁定")

    return Actor.model_validate(user)


def get_current_actor(actor: Optional[Actor] = Depends(get_optional_actor)) -> Actor:
    """必须登录"""
    if actor is None:
        raise _unauthorized("未提供认证信息")
    return actor
