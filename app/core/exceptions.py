# domain_exceptions.py
from typing import Optional


# ------------------------------------ 资源不存在（404） ------------------------------------

class ResourceNotFound(Exception):
    """
    需要某个资源存在但未找到时抛出，消息里带上实体类型和标识：
    - 例如 "Post not found with id: xxx"
    """

    entity = "Resource"

    def __init__(self, identifier: Optional[str] = None, message: Optional[str] = None, field: str = "id"):
        self.identifier = identifier
        if message:
            self.message = message
        elif identifier is not None:
            self.message = f"{self.entity} not found with {field}: {identifier}"
        else:
            self.message = f"{self.entity} not found."

        super().__init__(self.message)


class UserNotFound(ResourceNotFound):
    """
    在需要用户存在的场景下未找到对应用户时抛出：
    - 例如 get_user_by_uid / 管理员操作某个用户
    """
    entity = "User"

    def __init__(self, user_id: Optional[str] = None, message: Optional[str] = None, field: str = "id"):
        super().__init__(identifier=user_id, message=message, field=field)


class PostNotFound(ResourceNotFound):
    """找不到帖子（按 pid 或 slug）"""
    entity = "Post"

    def __init__(self, pid: Optional[str] = None, message: Optional[str] = None, field: str = "id"):
        super().__init__(identifier=pid, message=message, field=field)


class CommentNotFound(ResourceNotFound):
    """找不到评论，已软删除的评论对普通用户也视为不存在"""
    entity = "Comment"

    def __init__(self, cid: Optional[str] = None, message: Optional[str] = None, field: str = "id"):
        super().__init__(identifier=cid, message=message, field=field)


# ------------------------------------ 鉴权失败（401 / 403） ------------------------------------

class NotAuthenticated(Exception):
    """没有登录态（缺少或无效的 token）"""
    def __init__(self, message: str = "Authentication required."):
        self.message = message
        super().__init__(message)


class PermissionDenied(Exception):
    """
    已登录但没有权限：
    - 非作者修改/删除帖子或评论
    - 非管理员调用管理接口
    - 管理员对自己的账号执行禁用/删除
    """
    def __init__(self, message: str = "You do not have permission to perform this action."):
        self.message = message
        super().__init__(message)


# ------------------------------------ 参数不合法（400） ------------------------------------

class InvalidArgument(Exception):
    """
    参数校验失败：未知排序字段、未知枚举值、未知管理动作等
    field 用于在响应里指出是哪个字段
    """
    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


# ------------------------------------ 业务冲突（400） ------------------------------------

class BusinessConflict(Exception):
    """当前状态下不允许执行该操作"""
    def __init__(self, message: str = "Operation conflicts with current state."):
        self.message = message
        super().__init__(message)


class CommentAlreadyDeleted(BusinessConflict):
    """重复删除 / 修改已删除的评论"""
    def __init__(self, cid: Optional[str] = None, message: Optional[str] = None):
        super().__init__(message or f"comment {cid} is already deleted")


class PostAlreadyPublished(BusinessConflict):
    """帖子已经是发布状态，不能再次发布"""
    def __init__(self, pid: Optional[str] = None, message: Optional[str] = None):
        super().__init__(message or f"post {pid} is already published")


class PostNotPublished(BusinessConflict):
    """只能评论已发布的帖子"""
    def __init__(self, pid: Optional[str] = None, message: Optional[str] = None):
        super().__init__(message or f"Cannot comment on unpublished post {pid}")


class DuplicateUserError(BusinessConflict):
    """用户名 / 邮箱已被占用"""
    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"{field} '{value}' is already taken")


class PasswordMismatchError(BusinessConflict):
    """旧密码校验失败 / 两次输入的新密码不一致 / 新旧密码相同"""
    def __init__(self, message: str = "Old password does not match"):
        super().__init__(message)


# ------------------------------------ 上游服务失败 ------------------------------------

class SentimentAnalysisError(Exception):
    """
    情感分析服务调用失败：
    - 服务不可达 / 超时
    - 返回 success=false
    失败时不写缓存，调用方下次请求会重新分析
    """
    def __init__(self, message: str = "Sentiment analysis failed"):
        self.message = message
        super().__init__(message)
