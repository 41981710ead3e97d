from fastapi import APIRouter, Depends

from app.schemas.user import UserCreate, UserLogin, UserProfileOut, TokenOut
from app.core.access import Actor
from app.core.auth import get_current_actor
from app.core.biz_response import BizResponse
from app.service import auth_svc, user_svc

from app.storage.database import get_user_repo
from app.storage.user.user_interface import IUserRepository

from app.core.exceptions import DuplicateUserError, NotAuthenticated, PermissionDenied, UserNotFound
from app.core.logx import logger

auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post("/register", response_model=UserProfileOut)
def register(
    payload: UserCreate,
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """
    注册新用户（角色为普通用户）
    """
    try:
        user = auth_svc.register(user_repo=user_repo, user_data=payload, to_dict=True)
        return BizResponse(data=user, status_code=201)
    except DuplicateUserError as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@auth_router.post("/login", response_model=TokenOut)
def login(
    payload: UserLogin,
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """
    用户名 + 密码登录，返回 Bearer token
    """
    try:
        token = auth_svc.login(user_repo=user_repo, credentials=payload, to_dict=True)
        return BizResponse(data=token)
    except NotAuthenticated as e:
        return BizResponse(data=None, msg=str(e), status_code=401)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@auth_router.get("/whoami", response_model=UserProfileOut)
def whoami(
    actor: Actor = Depends(get_current_actor),
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """当前 token 对应的用户资料"""
    try:
        me = user_svc.get_me(user_repo=user_repo, actor=actor, to_dict=True)
        return BizResponse(data=me)
    except UserNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except NotAuthenticated as e:
        return BizResponse(data=None, msg=str(e), status_code=401)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)
