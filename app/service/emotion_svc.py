from typing import Dict, Optional, Callable

from sqlalchemy.exc import IntegrityError

from app.schemas.emotion import EmotionCreate, EmotionOut
from app.storage.emotion.emotion_interface import IEmotionRepository
from app.storage.post.post_interface import IPostRepository
from app.storage.comment.comment_interface import ICommentRepository
from app.service.sentiment_client import SentimentClient

from app.core.logx import logger
from app.core.exceptions import PostNotFound, CommentNotFound


def _analyze_and_save(
    emotion_repo: IEmotionRepository,
    client: SentimentClient,
    text: str,
    reread: Callable[[], Optional[EmotionOut]],
    post_id: Optional[str] = None,
    comment_id: Optional[str] = None,
) -> EmotionOut:
    """
    调用外部服务并写入缓存：
    - 分析失败直接抛 SentimentAnalysisError，不写缓存
    - 并发请求同一对象时，后写入的一方撞唯一约束，改为读取已有记录
    """
    result = client.analyze(text)

    data = EmotionCreate(
        post_id=post_id,
        comment_id=comment_id,
        text=text,
        sentiment=result.sentiment,
        confidence=result.confidence,
        probabilities=result.probabilities,
    )
    try:
        return emotion_repo.create(data)
    except IntegrityError:
        existing = reread()
        if existing is None:
            raise
        logger.info(f"Emotion already cached concurrently post_id={post_id} comment_id={comment_id}")
        return existing


def get_or_analyze_post(
    emotion_repo: IEmotionRepository,
    post_repo: IPostRepository,
    client: SentimentClient,
    post_id: str,
    to_dict: bool = True,
) -> Dict | EmotionOut:
    """
    帖子情感分析：
    1. 已有缓存直接返回，不再调用外部服务
    2. 帖子不存在报 404
    3. 分析帖子正文并缓存
    """
    cached = emotion_repo.get_by_post_id(post_id)
    if cached:
        return cached.model_dump() if to_dict else cached

    post = post_repo.get_post_by_pid(post_id)
    if not post:
        raise PostNotFound(post_id)

    emotion = _analyze_and_save(
        emotion_repo, client, post.content,
        reread=lambda: emotion_repo.get_by_post_id(post_id),
        post_id=post_id,
    )
    logger.info(f"Analyzed post pid={post_id} sentiment={emotion.sentiment} confidence={emotion.confidence}")
    return emotion.model_dump() if to_dict else emotion


def get_or_analyze_comment(
    emotion_repo: IEmotionRepository,
    comment_repo: ICommentRepository,
    client: SentimentClient,
    comment_id: str,
    to_dict: bool = True,
) -> Dict | EmotionOut:
    """评论情感分析，逻辑同帖子；分析的是评论原文"""
    cached = emotion_repo.get_by_comment_id(comment_id)
    if cached:
        return cached.model_dump() if to_dict else cached

    comment = comment_repo.get_comment_by_cid_for_admin(comment_id)
    if not comment:
        raise CommentNotFound(comment_id)

    emotion = _analyze_and_save(
        emotion_repo, client, comment.content,
        reread=lambda: emotion_repo.get_by_comment_id(comment_id),
        comment_id=comment_id,
    )
    logger.info(f"Analyzed comment cid={comment_id} sentiment={emotion.sentiment} confidence={emotion.confidence}")
    return emotion.model_dump() if to_dict else emotion
