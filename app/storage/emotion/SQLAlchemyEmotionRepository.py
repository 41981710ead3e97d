from typing import Optional, Dict
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.emotion import Emotion
from app.models.post import Post
from app.models.comment import Comment
from app.schemas.emotion import EmotionCreate, EmotionOut
from app.storage.emotion.emotion_interface import IEmotionRepository
from app.core.db import transaction


class SQLAlchemyEmotionRepository(IEmotionRepository):
    """
    使用 SQLAlchemy 实现的情感分析缓存仓库
    """

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return self.db.query(Emotion)

    def get_by_post_id(self, post_id: str) -> Optional[EmotionOut]:
        emotion = self._base_query().filter(Emotion.post_id == post_id).first()
        return EmotionOut.model_validate(emotion) if emotion else None

    def get_by_comment_id(self, comment_id: str) -> Optional[EmotionOut]:
        emotion = self._base_query().filter(Emotion.comment_id == comment_id).first()
        return EmotionOut.model_validate(emotion) if emotion else None

    def create(self, data: EmotionCreate) -> EmotionOut:
        emotion = Emotion(
            post_id=data.post_id,
            comment_id=data.comment_id,
            text=data.text,
            sentiment=data.sentiment,
            confidence=data.confidence,
            probabilities=dict(data.probabilities or {}),
        )

        with transaction(self.db):
            self.db.add(emotion)

        self.db.refresh(emotion)
        return EmotionOut.model_validate(emotion)

    def count_post_sentiments_by_author(self, author_id: str) -> Dict[str, int]:
        rows = (
            self.db.query(Emotion.sentiment, func.count(Emotion._id))
            .join(Post, Post.pid == Emotion.post_id)
            .filter(Post.author_id == author_id)
            .group_by(Emotion.sentiment)
            .all()
        )
        return {sentiment: count for sentiment, count in rows}

    def count_comment_sentiments_by_user(self, user_id: str) -> Dict[str, int]:
        rows = (
            self.db.query(Emotion.sentiment, func.count(Emotion._id))
            .join(Comment, Comment.cid == Emotion.comment_id)
            .filter(Comment.user_id == user_id)
            .group_by(Emotion.sentiment)
            .all()
        )
        return {sentiment: count for sentiment, count in rows}
