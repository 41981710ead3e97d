from typing import Dict, List, Optional

from app.schemas.user import UserProfileOut
from app.schemas.common import BatchItemResult, BatchOperationOut
from app.storage.user.user_interface import IUserRepository
from app.storage.unit_of_work import IUnitOfWork
from app.models.user import UserRole

from app.core.access import Actor, require_admin, forbid_self_target
from app.core.logx import logger
from app.core.exceptions import UserNotFound, PermissionDenied
from app.core.pagination import PageResponse, page_query, validate_sort_column, ASC

# 管理端用户列表允许的排序字段
ADMIN_USER_SORT_COLUMNS = ("created_at", "updated_at", "username")
ADMIN_USER_DEFAULT_SORT = "created_at"

SELF_DELETE_MESSAGE = "Cannot delete your own account."
SELF_STATUS_MESSAGE = "Cannot modify your own account status."


def list_users(
    user_repo: IUserRepository,
    actor: Optional[Actor],
    enabled: Optional[bool] = None,
    role: Optional[str] = None,
    page: int = 0,
    page_size: int = 10,
    sort: Optional[str] = None,
    direction: Optional[str] = None,
    to_dict: bool = True,
) -> Dict | PageResponse[UserProfileOut]:
    """
    管理员分页查看用户，可按启用状态、角色过滤
    角色 code 忽略大小写，未知角色报参数错误
    """
    require_admin(actor)
    role_code = UserRole.from_code(role).code if role else None
    sort_column = validate_sort_column(sort, ADMIN_USER_SORT_COLUMNS, ADMIN_USER_DEFAULT_SORT)

    query = page_query(page, page_size, sort_column, direction, default_direction=ASC)
    result = user_repo.list_users(query, sort_column=sort_column, enabled=enabled, role=role_code)
    return result.model_dump() if to_dict else result


def get_user(
    user_repo: IUserRepository,
    actor: Optional[Actor],
    uid: str,
    to_dict: bool = True,
) -> Dict | UserProfileOut:
    require_admin(actor)
    user = user_repo.get_user_by_uid(uid)
    if not user:
        raise UserNotFound(uid)
    profile = UserProfileOut.model_validate(user.model_dump(exclude={"password"}))
    return profile.model_dump() if to_dict else profile


def delete_user(
    user_repo: IUserRepository,
    actor: Optional[Actor],
    uid: str,
) -> bool:
    """
    管理员物理删除用户：
    - 不能删除自己
    - 用户的帖子和评论保留（只按 uid 引用）
    """
    actor = require_admin(actor)
    forbid_self_target(actor, uid, SELF_DELETE_MESSAGE)

    if not user_repo.hard_delete_user(uid):
        raise UserNotFound(uid)

    logger.info(f"[ADMIN] hard deleted user uid={uid} by admin={actor.uid}")
    return True


def set_user_status(
    user_repo: IUserRepository,
    actor: Optional[Actor],
    uid: str,
    enabled: bool,
    to_dict: bool = True,
) -> Dict | UserProfileOut:
    """管理员启用 / 禁用用户，不能修改自己的状态"""
    actor = require_admin(actor)
    forbid_self_target(actor, uid, SELF_STATUS_MESSAGE)

    if not user_repo.set_enabled(uid, enabled):
        raise UserNotFound(uid)

    logger.info(f"[ADMIN] set user uid={uid} enabled={enabled} by admin={actor.uid}")
    return get_user(user_repo, actor, uid, to_dict=to_dict)


def batch_set_user_status(
    uow: IUnitOfWork,
    user_repo: IUserRepository,
    actor: Optional[Actor],
    user_ids: List[str],
    enabled: bool,
    to_dict: bool = True,
) -> Dict | BatchOperationOut:
    """
    批量启用 / 禁用：
    - 每个用户单独一个事务
    - 包含自己或用户不存在时，该条记为失败，其余照常处理
    """
    actor = require_admin(actor)

    items: List[BatchItemResult] = []
    for uid in user_ids:
        try:
            forbid_self_target(actor, uid, SELF_STATUS_MESSAGE)
            with uow.atomic():
                if not user_repo.set_enabled(uid, enabled):
                    raise UserNotFound(uid)
            items.append(BatchItemResult(id=uid, ok=True))
        except (UserNotFound, PermissionDenied) as e:
            logger.warning(f"[ADMIN] batch user status skipped uid={uid}: {e.message}")
            items.append(BatchItemResult(id=uid, ok=False, error=e.message))
        except Exception as e:
            logger.exception(f"[ADMIN] batch user status failed uid={uid}: {e}")
            items.append(BatchItemResult(id=uid, ok=False, error=str(e)))

    result = BatchOperationOut.from_items(items)
    logger.info(
        f"[ADMIN] batch set user enabled={enabled} total={result.total} "
        f"success={result.success_count} failure={result.failure_count} by admin={actor.uid}"
    )
    return result.model_dump() if to_dict else result
