from contextlib import contextmanager

from sqlalchemy.orm import Session

_DEPTH_KEY = "tx_depth"


@contextmanager
def transaction(db: Session):
    """
    事务管理器：
    - 最外层：正常结束 commit，异常 rollback 后继续抛出
    - 嵌套层：只 flush，把提交权交给最外层

    这样仓库层的单条写操作可以各自 commit，
    业务层需要多条写操作原子化时，在外面再套一层即可（见 unit_of_work）
    """
    depth = db.info.get(_DEPTH_KEY, 0)
    db.info[_DEPTH_KEY] = depth + 1
    try:
        yield db
        if depth == 0:
            db.commit()
        else:
            db.flush()
    except Exception:
        if depth == 0:
            db.rollback()
        raise
    finally:
        db.info[_DEPTH_KEY] = depth
