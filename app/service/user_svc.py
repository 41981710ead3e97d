from typing import Optional, Dict, Any

from app.schemas.user import (
    UserOut,
    UserProfileOut,
    UserUpdate,
    UserPasswordUpdate,
    UserDeleteRequest,
    UserEmotionStatsOut,
    UserAllOut,
)
from app.storage.user.user_interface import IUserRepository
from app.storage.emotion.emotion_interface import IEmotionRepository

from app.core.access import Actor, require_authenticated
from app.core.logx import logger
from app.core.exceptions import UserNotFound, PasswordMismatchError, DuplicateUserError

from app.core.security import hash_password, verify_password


def _to_profile(user: UserAllOut) -> UserProfileOut:
    return UserProfileOut.model_validate(user.model_dump(exclude={"password"}))


def _get_user_or_raise(user_repo: IUserRepository, uid: str) -> UserAllOut:
    user = user_repo.get_user_by_uid(uid)
    if not user:
        raise UserNotFound(uid)
    return user


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def get_me(user_repo: IUserRepository, actor: Optional[Actor], to_dict: bool = True) -> Dict | UserProfileOut:
    """当前登录用户的完整资料（含邮箱、状态）"""
    actor = require_authenticated(actor)
    profile = _to_profile(_get_user_or_raise(user_repo, actor.uid))
    return profile.model_dump() if to_dict else profile


def get_public_user(user_repo: IUserRepository, uid: str, to_dict: bool = True) -> Dict | UserOut:
    """
    根据 uid 获取用户公开信息（不含邮箱）
    """
    user = _get_user_or_raise(user_repo, uid)
    out = UserOut.model_validate(user.model_dump(include=set(UserOut.model_fields)))
    return out.model_dump() if to_dict else out


def update_profile(
    user_repo: IUserRepository,
    actor: Optional[Actor],
    data: UserUpdate,
    to_dict: bool = True,
) -> Dict | UserProfileOut:
    """
    用户更新自己的资料：
    - 只修改请求里出现的字段
    - 邮箱换成别人已占用的报冲突
    - avatar_url / bio 去掉首尾空白，空字符串视为清空
    """
    actor = require_authenticated(actor)
    current = _get_user_or_raise(user_repo, actor.uid)

    changes = data.model_dump(exclude_unset=True)
    fields: Dict[str, Any] = {}

    email = changes.get("email")
    if email is not None and email != current.email:
        if user_repo.exists_by_email(email):
            raise DuplicateUserError("email", email)
        fields["email"] = email
    if "avatar_url" in changes:
        fields["avatar_url"] = _blank_to_none(changes["avatar_url"])
    if "bio" in changes:
        fields["bio"] = _blank_to_none(changes["bio"])

    updated = user_repo.update_profile(actor.uid, fields)
    if not updated:
        raise UserNotFound(actor.uid)

    logger.info(f"Updated profile uid={actor.uid} fields={sorted(fields)}")
    profile = _to_profile(updated)
    return profile.model_dump() if to_dict else profile


def change_password(user_repo: IUserRepository, actor: Optional[Actor], data: UserPasswordUpdate) -> bool:
    """
    修改密码：
    1. 两次输入的新密码必须一致
    2. 旧密码必须正确
    3. 新密码不能与旧密码相同
    """
    actor = require_authenticated(actor)
    user = _get_user_or_raise(user_repo, actor.uid)

    if data.new_password != data.confirm_password:
        raise PasswordMismatchError("New password and confirmation do not match")
    if not verify_password(data.current_password, user.password):
        raise PasswordMismatchError()
    if data.new_password == data.current_password:
        raise PasswordMismatchError("New password must differ from the old password")

    ok = user_repo.update_password(actor.uid, hash_password(data.new_password))
    if ok:
        logger.info(f"Changed password uid={actor.uid}")
    return ok


def delete_my_account(user_repo: IUserRepository, actor: Optional[Actor], data: UserDeleteRequest) -> bool:
    """
    注销账号（软删除）：
    - 需要再次输入密码
    - 只把账号置为禁用，帖子和评论保留
    """
    actor = require_authenticated(actor)
    user = _get_user_or_raise(user_repo, actor.uid)
    if not verify_password(data.password, user.password):
        raise PasswordMismatchError("Password does not match")

    ok = user_repo.set_enabled(actor.uid, False)
    if ok:
        logger.info(f"User deactivated own account uid={actor.uid}")
    return ok


def get_user_emotion_stats(
    user_repo: IUserRepository,
    emotion_repo: IEmotionRepository,
    uid: str,
    to_dict: bool = True,
) -> Dict | UserEmotionStatsOut:
    """
    用户的情感统计：只统计已经分析过（有缓存）的帖子和评论
    """
    _get_user_or_raise(user_repo, uid)

    post_stats = emotion_repo.count_post_sentiments_by_author(uid)
    comment_stats = emotion_repo.count_comment_sentiments_by_user(uid)

    total_stats: Dict[str, int] = dict(post_stats)
    for sentiment, count in comment_stats.items():
        total_stats[sentiment] = total_stats.get(sentiment, 0) + count

    out = UserEmotionStatsOut(
        user_id=uid,
        post_stats=post_stats,
        comment_stats=comment_stats,
        total_stats=total_stats,
    )
    return out.model_dump() if to_dict else out
