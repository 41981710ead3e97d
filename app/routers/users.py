from fastapi import APIRouter, Depends

from app.schemas.user import (
    UserOut,
    UserProfileOut,
    UserUpdate,
    UserPasswordUpdate,
    UserDeleteRequest,
    UserEmotionStatsOut,
)

from app.core.access import Actor
from app.core.auth import get_current_actor
from app.core.biz_response import BizResponse
from app.service import user_svc

from app.storage.database import get_user_repo, get_emotion_repo
from app.storage.user.user_interface import IUserRepository
from app.storage.emotion.emotion_interface import IEmotionRepository

from app.core.exceptions import (
    UserNotFound,
    NotAuthenticated,
    PasswordMismatchError,
    DuplicateUserError,
)
from app.core.logx import logger

users_router = APIRouter(prefix="/users", tags=["users"])


# --------------------------------- 当前用户 ---------------------------------
@users_router.get("/me", response_model=UserProfileOut)
def get_me(
    actor: Actor = Depends(get_current_actor),
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """当前登录用户的资料"""
    try:
        user = user_svc.get_me(user_repo=user_repo, actor=actor, to_dict=True)
        return BizResponse(data=user)
    except UserNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except NotAuthenticated as e:
        return BizResponse(data=None, msg=str(e), status_code=401)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@users_router.put("/me", response_model=UserProfileOut)
def update_me(
    payload: UserUpdate,
    actor: Actor = Depends(get_current_actor),
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """
    修改自己的邮箱 / 头像 / 简介
    """
    try:
        user = user_svc.update_profile(user_repo=user_repo, actor=actor, data=payload, to_dict=True)
        return BizResponse(data=user)
    except UserNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except DuplicateUserError as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except NotAuthenticated as e:
        return BizResponse(data=None, msg=str(e), status_code=401)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@users_router.put("/me/password")
def change_password(
    payload: UserPasswordUpdate,
    actor: Actor = Depends(get_current_actor),
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """
    修改密码（需要提供当前密码）
    """
    try:
        ok = user_svc.change_password(user_repo=user_repo, actor=actor, data=payload)
        return BizResponse(data=ok, msg="password changed")
    except PasswordMismatchError as e:
        return BizResponse(data=False, msg=str(e), status_code=400)
    except UserNotFound as e:
        return BizResponse(data=False, msg=str(e), status_code=404)
    except NotAuthenticated as e:
        return BizResponse(data=False, msg=str(e), status_code=401)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=False, msg=str(e), status_code=500)


@users_router.delete("/me")
def delete_me(
    payload: UserDeleteRequest,
    actor: Actor = Depends(get_current_actor),
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """
    注销账号：账号置为禁用，之后无法登录
    """
    try:
        ok = user_svc.delete_my_account(user_repo=user_repo, actor=actor, data=payload)
        return BizResponse(data=ok, msg="account deactivated")
    except PasswordMismatchError as e:
        return BizResponse(data=False, msg=str(e), status_code=400)
    except UserNotFound as e:
        return BizResponse(data=False, msg=str(e), status_code=404)
    except NotAuthenticated as e:
        return BizResponse(data=False, msg=str(e), status_code=401)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=False, msg=str(e), status_code=500)


# --------------------------------- 公开信息 ---------------------------------
@users_router.get("/{uid}", response_model=UserOut)
def get_user(uid: str, user_repo: IUserRepository = Depends(get_user_repo)):
    """
    根据 uid 获取用户公开信息
    """
    try:
        user = user_svc.get_public_user(user_repo=user_repo, uid=uid, to_dict=True)
        return BizResponse(data=user)
    except UserNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@users_router.get("/{uid}/emotion-stats", response_model=UserEmotionStatsOut)
def get_user_emotion_stats(
    uid: str,
    user_repo: IUserRepository = Depends(get_user_repo),
    emotion_repo: IEmotionRepository = Depends(get_emotion_repo),
):
    """
    用户帖子 / 评论的情感分布（只统计已分析过的内容）
    """
    try:
        stats = user_svc.get_user_emotion_stats(
            user_repo=user_repo,
            emotion_repo=emotion_repo,
            uid=uid,
            to_dict=True,
        )
        return BizResponse(data=stats)
    except UserNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)
