from typing import Optional, Dict, Any
from sqlalchemy.orm import Session
from app.models.user import User
from app.schemas.user import (
    UserCreate,
    UserAllOut,
    UserProfileOut,
)
from app.storage.user.user_interface import IUserRepository
from app.core.pagination import PageQuery, PageResponse, create_page_response
from app.core.db import transaction
from app.core.time import now_utc8

class SQLAlchemyUserRepository(IUserRepository):
    """
    使用 SQLAlchemy 实现的用户仓库
    业务层依赖 IUserRepository 接口，而不是这个具体实现
    """

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        """内部封装一个基础查询"""
        return self.db.query(User)

    def _get_orm(self, uid: str) -> Optional[User]:
        return self._base_query().filter(User.uid == uid).first()

    def get_user_by_uid(self, uid: str) -> Optional[UserAllOut]:
        user = self._get_orm(uid)
        return UserAllOut.model_validate(user) if user else None

    def get_user_by_username(self, username: str) -> Optional[UserAllOut]:
        user = self._base_query().filter(User.username == username).first()
        return UserAllOut.model_validate(user) if user else None

    def exists_by_username(self, username: str) -> bool:
        return self.db.query(self._base_query().filter(User.username == username).exists()).scalar()

    def exists_by_email(self, email: str) -> bool:
        return self.db.query(self._base_query().filter(User.email == email).exists()).scalar()

    def create_user(self, user_data: UserCreate) -> UserAllOut:
        """
        创建用户
        - 假定 user_data.password 已经是加密后的哈希
        - role / is_enabled / is_locked 使用模型默认值
        """
        data = user_data.model_dump(exclude_none=True)

        user = User(**data)

        # 使用事务管理器
        with transaction(self.db):
            self.db.add(user)

        # 提交完成之后再 refresh，拿到最新状态（包括默认值等）
        self.db.refresh(user)

        return UserAllOut.model_validate(user)

    def update_profile(self, uid: str, fields: Dict[str, Any]) -> Optional[UserAllOut]:
        user = self._get_orm(uid)
        if not user:
            return None

        with transaction(self.db):
            for field, value in fields.items():
                setattr(user, field, value)
            user.updated_at = now_utc8()

        self.db.refresh(user)
        return UserAllOut.model_validate(user)

    def update_password(self, uid: str, new_password_hash: str) -> bool:
        """
        修改密码：
        - new_password_hash 需在业务层先完成加密
        """
        user = self._get_orm(uid)
        if not user:
            return False

        with transaction(self.db):
            user.password = new_password_hash
            user.updated_at = now_utc8()

        self.db.refresh(user)
        return True

    def set_enabled(self, uid: str, enabled: bool) -> bool:
        """
        启用 / 禁用：
        - 用户注销（软删除）和管理员禁用都走这里
        """
        user = self._get_orm(uid)
        if not user:
            return False

        with transaction(self.db):
            user.is_enabled = enabled
            user.updated_at = now_utc8()

        return True

    def hard_delete_user(self, uid: str) -> bool:
        """
        直接物理删除用户，不再保留记录
        注意：该用户的帖子、评论按 uid 引用，不会被一起删除
        """
        user = self._get_orm(uid)
        if not user:
            return False

        with transaction(self.db):
            self.db.delete(user)

        return True

    def list_users(
        self,
        query: PageQuery,
        sort_column: str,
        enabled: Optional[bool] = None,
        role: Optional[str] = None,
    ) -> PageResponse[UserProfileOut]:
        base_q = self._base_query()
        if enabled is not None:
            base_q = base_q.filter(User.is_enabled.is_(enabled))
        if role is not None:
            base_q = base_q.filter(User.role == role)

        column = getattr(User, sort_column)
        order = column.desc() if query.descending else column.asc()
        base_q = base_q.order_by(order, User._id.desc())

        total = base_q.count()
        users_orm = (
            base_q
            .offset(query.offset)   # page 从 0 开始
            .limit(query.limit)
            .all()
        )

        # 把 ORM 对象转换为 Pydantic 模型
        users_out = [UserProfileOut.model_validate(u) for u in users_orm]

        return create_page_response(users_out, query.page, query.size, total)
