from typing import Dict

from app.schemas.user import UserCreate, UserLogin, UserProfileOut, TokenOut
from app.storage.user.user_interface import IUserRepository

from app.core.logx import logger
from app.core.exceptions import DuplicateUserError, NotAuthenticated, PermissionDenied
from app.core.security import hash_password, verify_password, create_access_token


def register(user_repo: IUserRepository, user_data: UserCreate, to_dict: bool = True) -> Dict | UserProfileOut:
    """
    注册：
    1. 用户名、邮箱都不能被占用
    2. 对明文密码做 Argon2 哈希
    3. 创建 User 记录（角色为普通用户，启用状态）
    """
    if user_repo.exists_by_username(user_data.username):
        raise DuplicateUserError("username", user_data.username)
    if user_repo.exists_by_email(user_data.email):
        raise DuplicateUserError("email", user_data.email)

    hashed = user_data.model_copy(update={"password": hash_password(user_data.password)})
    new_user = user_repo.create_user(hashed)
    logger.info(f"Registered user uid={new_user.uid} username={new_user.username}")

    profile = UserProfileOut.model_validate(new_user.model_dump(exclude={"password"}))
    return profile.model_dump() if to_dict else profile


def login(user_repo: IUserRepository, credentials: UserLogin, to_dict: bool = True) -> Dict | TokenOut:
    """
    用户名 + 密码登录，成功返回 JWT
    - 用户不存在和密码错误返回同一个提示
    - 已禁用 / 锁定的账号拒绝登录
    """
    user = user_repo.get_user_by_username(credentials.username)
    if not user or not verify_password(credentials.password, user.password):
        logger.warning(f"Login failed for username={credentials.username}")
        raise NotAuthenticated("Invalid username or password")
    if not user.is_enabled or user.is_locked:
        raise PermissionDenied("Account is disabled or locked")

    token = create_access_token(user.uid, role=user.role.value)
    logger.info(f"User logged in uid={user.uid}")

    out = TokenOut(
        access_token=token,
        user=UserProfileOut.model_validate(user.model_dump(exclude={"password"})),
    )
    return out.model_dump() if to_dict else out
