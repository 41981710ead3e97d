from typing import Optional

from fastapi import APIRouter, Depends

from app.schemas.user import UserProfileOut, UserStatusUpdate, BatchUserStatusUpdate
from app.schemas.common import BatchOperationOut
from app.core.access import Actor
from app.core.auth import get_current_actor
from app.core.biz_response import BizResponse
from app.service import admin_user_svc

from app.storage.database import get_user_repo, get_uow
from app.storage.user.user_interface import IUserRepository
from app.storage.unit_of_work import IUnitOfWork

from app.core.exceptions import UserNotFound, InvalidArgument, PermissionDenied
from app.core.logx import logger

admin_users_router = APIRouter(prefix="/admin/users", tags=["admin-users"])


@admin_users_router.get("/")
def list_users(
    page: int = 0,
    page_size: int = 10,
    sort: Optional[str] = None,
    direction: Optional[str] = None,
    enabled: Optional[bool] = None,
    role: Optional[str] = None,
    actor: Actor = Depends(get_current_actor),
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """
    分页获取用户，可按启用状态、角色过滤
    """
    try:
        result = admin_user_svc.list_users(
            user_repo=user_repo,
            actor=actor,
            enabled=enabled,
            role=role,
            page=page,
            page_size=page_size,
            sort=sort,
            direction=direction,
            to_dict=True,
        )
        return BizResponse(data=result)
    except InvalidArgument as e:
        return BizResponse(data=None, msg=str(e), status_code=400)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_users_router.put("/batch/status", response_model=BatchOperationOut)
def batch_set_user_status(
    payload: BatchUserStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    uow: IUnitOfWork = Depends(get_uow),
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """
    批量启用 / 禁用用户，包含自己的那一条会失败
    """
    try:
        result = admin_user_svc.batch_set_user_status(
            uow=uow,
            user_repo=user_repo,
            actor=actor,
            user_ids=payload.user_ids,
            enabled=payload.enabled,
            to_dict=True,
        )
        return BizResponse(data=result)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_users_router.get("/{uid}", response_model=UserProfileOut)
def get_user(
    uid: str,
    actor: Actor = Depends(get_current_actor),
    user_repo: IUserRepository = Depends(get_user_repo),
):
    try:
        user = admin_user_svc.get_user(user_repo=user_repo, actor=actor, uid=uid, to_dict=True)
        return BizResponse(data=user)
    except UserNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)


@admin_users_router.delete("/{uid}")
def delete_user(
    uid: str,
    actor: Actor = Depends(get_current_actor),
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """
    物理删除用户（不能删除自己）
    """
    try:
        ok = admin_user_svc.delete_user(user_repo=user_repo, actor=actor, uid=uid)
        return BizResponse(data=ok, msg="user deleted")
    except UserNotFound as e:
        return BizResponse(data=False, msg=str(e), status_code=404)
    except PermissionDenied as e:
        return BizResponse(data=False, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=False, msg=str(e), status_code=500)


@admin_users_router.put("/{uid}/status", response_model=UserProfileOut)
def set_user_status(
    uid: str,
    payload: UserStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    user_repo: IUserRepository = Depends(get_user_repo),
):
    """
    启用 / 禁用用户（不能修改自己）
    """
    try:
        user = admin_user_svc.set_user_status(
            user_repo=user_repo,
            actor=actor,
            uid=uid,
            enabled=payload.enabled,
            to_dict=True,
        )
        return BizResponse(data=user)
    except UserNotFound as e:
        return BizResponse(data=None, msg=str(e), status_code=404)
    except PermissionDenied as e:
        return BizResponse(data=None, msg=str(e), status_code=403)
    except Exception as e:
        logger.exception(e)
        return BizResponse(data=None, msg=str(e), status_code=500)
