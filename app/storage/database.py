from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from fastapi import Depends

from app.core.config import settings
from app.models.base import Base
# 导入所有模型，保证 relationship 字符串引用能解析、create_all 能建全表
from app.models import user, post, post_stats, comment, emotion  # noqa: F401
from app.storage.user.SQLAlchemyUserRepository import SQLAlchemyUserRepository
from app.storage.post.SQLAlchemyPostRepository import SQLAlchemyPostRepository
from app.storage.post_stats.SQLAlchemyPostStatsRepository import SQLAlchemyPostStatsRepository
from app.storage.comment.SQLAlchemyCommentRepository import SQLAlchemyCommentRepository
from app.storage.emotion.SQLAlchemyEmotionRepository import SQLAlchemyEmotionRepository
from app.storage.unit_of_work import SQLAlchemyUnitOfWork

# ======== 配置区（见 app/core/config.py，可通过 .env 覆盖） ========
DATABASE_URL = settings.DATABASE_URL

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# SQLAlchemy 引擎
engine = create_engine(DATABASE_URL, echo=settings.DB_ECHO, pool_pre_ping=True, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """按模型建表（已存在的表不会重复创建）"""
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# 同一个请求内 get_db 只会执行一次，所有仓库和工作单元共用一个 Session
def get_user_repo(db: Session = Depends(get_db)) -> SQLAlchemyUserRepository:
    return SQLAlchemyUserRepository(db)
def get_post_repo(db: Session = Depends(get_db)) -> SQLAlchemyPostRepository:
    return SQLAlchemyPostRepository(db)
def get_poststats_repo(db: Session = Depends(get_db)) -> SQLAlchemyPostStatsRepository:
    return SQLAlchemyPostStatsRepository(db)
def get_comment_repo(db: Session = Depends(get_db)) -> SQLAlchemyCommentRepository:
    return SQLAlchemyCommentRepository(db)
def get_emotion_repo(db: Session = Depends(get_db)) -> SQLAlchemyEmotionRepository:
    return SQLAlchemyEmotionRepository(db)
def get_uow(db: Session = Depends(get_db)) -> SQLAlchemyUnitOfWork:
    return SQLAlchemyUnitOfWork(db)
