"""
校园墙后端 - FastAPI 应用主入口
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.biz_response import BizResponse
from app.core.logx import logger
from app.storage.database import init_db
from app.routers import (
    auth,
    users,
    posts,
    comments,
    emotion,
    admin_posts,
    admin_comments,
    admin_users,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} started")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="校园墙后端API",
    lifespan=lifespan,
)

# 配置CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 认证依赖抛出的 401 / 403 也包成统一响应体
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return BizResponse(data=None, msg=str(exc.detail), status_code=exc.status_code, headers=exc.headers)


# 请求体 / 参数校验失败统一返回 400，data 里给出字段级错误
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return BizResponse(data=errors, msg="Validation failed", status_code=400)


# 注册路由
app.include_router(auth.auth_router)
app.include_router(users.users_router)
app.include_router(posts.posts_router)
app.include_router(comments.comments_router)
app.include_router(emotion.emotion_router)
app.include_router(admin_posts.admin_posts_router)
app.include_router(admin_comments.admin_comments_router)
app.include_router(admin_users.admin_users_router)


# uvicorn main:app
# uvicorn main:app --reload
@app.get("/")
def root():
    return {"message": f"Welcome to {settings.APP_NAME}", "version": settings.APP_VERSION}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
