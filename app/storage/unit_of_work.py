from contextlib import contextmanager
from typing import ContextManager, Iterator, Protocol

from sqlalchemy.orm import Session

from app.core.db import transaction


class IUnitOfWork(Protocol):
    """
    工作单元：业务层用它把多次仓库写操作包进同一个事务
        with uow.atomic():
            comment_repo.create_comment(...)
            stats_repo.update_comments(...)
    块内任何异常都会整体回滚
    """

    def atomic(self) -> ContextManager[None]:
        ...


class SQLAlchemyUnitOfWork(IUnitOfWork):
    """
    与仓库共用同一个请求级 Session：
    最外层 transaction 负责提交，仓库里的 transaction 自动变成只 flush
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with transaction(self.db):
            yield
