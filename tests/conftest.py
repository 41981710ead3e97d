# tests/conftest.py
import os
from typing import Callable, Iterator

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# 必须在导入应用之前设置，避免默认引擎指向 MySQL
os.environ.setdefault("DB_URL", "sqlite://")

from app.core.access import Actor
from app.core.security import create_access_token
from app.models.base import Base
from app.models.user import UserRole
from app.schemas.user import UserCreate, UserAllOut
from app.schemas.post import PostCreate, PostOut
from app.service import post_svc
from app.service.sentiment_client import SentimentClient, get_sentiment_client
from app.storage.database import get_db
from app.storage.user.SQLAlchemyUserRepository import SQLAlchemyUserRepository
from app.storage.post.SQLAlchemyPostRepository import SQLAlchemyPostRepository
from app.storage.post_stats.SQLAlchemyPostStatsRepository import SQLAlchemyPostStatsRepository
from app.storage.comment.SQLAlchemyCommentRepository import SQLAlchemyCommentRepository
from app.storage.emotion.SQLAlchemyEmotionRepository import SQLAlchemyEmotionRepository
from app.storage.unit_of_work import SQLAlchemyUnitOfWork
from app.core.security import hash_password
from main import app as fastapi_app

TEST_DB_URL = "sqlite://"
DEFAULT_PASSWORD = "secret123"


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


# ------------------------------ 仓库 ------------------------------

@pytest.fixture()
def user_repo(db: Session) -> SQLAlchemyUserRepository:
    return SQLAlchemyUserRepository(db)


@pytest.fixture()
def post_repo(db: Session) -> SQLAlchemyPostRepository:
    return SQLAlchemyPostRepository(db)


@pytest.fixture()
def stats_repo(db: Session) -> SQLAlchemyPostStatsRepository:
    return SQLAlchemyPostStatsRepository(db)


@pytest.fixture()
def comment_repo(db: Session) -> SQLAlchemyCommentRepository:
    return SQLAlchemyCommentRepository(db)


@pytest.fixture()
def emotion_repo(db: Session) -> SQLAlchemyEmotionRepository:
    return SQLAlchemyEmotionRepository(db)


@pytest.fixture()
def uow(db: Session) -> SQLAlchemyUnitOfWork:
    return SQLAlchemyUnitOfWork(db)


# ------------------------------ 数据工厂 ------------------------------

@pytest.fixture()
def make_user(user_repo: SQLAlchemyUserRepository) -> Callable[..., UserAllOut]:
    def _make(username: str, role: UserRole = UserRole.USER, password: str = DEFAULT_PASSWORD) -> UserAllOut:
        user = user_repo.create_user(UserCreate(
            username=username,
            email=f"{username}@example.com",
            password=hash_password(password),
        ))
        if role is not UserRole.USER:
            user = user_repo.update_profile(user.uid, {"role": role.value})
        return user

    return _make


@pytest.fixture()
def make_actor() -> Callable[[UserAllOut], Actor]:
    def _make(user: UserAllOut) -> Actor:
        return Actor.model_validate(user)

    return _make


@pytest.fixture()
def alice(make_user, make_actor) -> Actor:
    return make_actor(make_user("alice"))


@pytest.fixture()
def bob(make_user, make_actor) -> Actor:
    return make_actor(make_user("bob"))


@pytest.fixture()
def admin(make_user, make_actor) -> Actor:
    return make_actor(make_user("admin", role=UserRole.ADMIN))


@pytest.fixture()
def make_post(post_repo: SQLAlchemyPostRepository) -> Callable[..., PostOut]:
    def _make(actor: Actor, title: str = "Hello Wall", content: str = "first post", status: str = "PUBLISHED", **extra) -> PostOut:
        data = PostCreate(title=title, content=content, status=status, **extra)
        return post_svc.create_post(post_repo, actor, data, to_dict=False)

    return _make


@pytest.fixture()
def password() -> str:
    """make_user 创建的用户默认密码"""
    return DEFAULT_PASSWORD


@pytest.fixture()
def auth_headers() -> Callable[[Actor], dict]:
    def _headers(actor: Actor) -> dict:
        return {"Authorization": f"Bearer {create_access_token(actor.uid)}"}

    return _headers


# ------------------------------ HTTP ------------------------------

@pytest.fixture()
def sentiment_transport() -> Callable[..., httpx.MockTransport]:
    """固定返回某个响应的情感服务"""
    def _make(payload: dict, status_code: int = 200) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, json=payload)

        return httpx.MockTransport(handler)

    return _make


@pytest.fixture()
def sentiment_calls() -> list:
    return []


@pytest.fixture()
def sentiment_client(sentiment_calls: list) -> SentimentClient:
    def handler(request: httpx.Request) -> httpx.Response:
        sentiment_calls.append(request)
        return httpx.Response(200, json={
            "success": True,
            "sentiment": "positive",
            "confidence": 0.91,
            "probabilities": {"positive": 0.91, "neutral": 0.06, "negative": 0.03},
        })

    return SentimentClient(url="http://sentiment.test/analyze_sentiment", transport=httpx.MockTransport(handler))


@pytest.fixture()
def client(db: Session, sentiment_client: SentimentClient) -> Iterator[TestClient]:
    def _get_db_override() -> Iterator[Session]:
        yield db

    fastapi_app.dependency_overrides[get_db] = _get_db_override
    fastapi_app.dependency_overrides[get_sentiment_client] = lambda: sentiment_client
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()
