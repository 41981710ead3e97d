from sqlalchemy import Column, Integer, String, Float, Text, JSON, TIMESTAMP, UniqueConstraint, CheckConstraint, Index
from app.models.base import Base
from app.core.time import now_utc8
import uuid

class Emotion(Base):
    """ 情感分析结果缓存表：每个帖子 / 每条评论最多一条，写入后不再修改。

        CREATE TABLE IF NOT EXISTS emotions (
            _id INT AUTO_INCREMENT PRIMARY KEY,                -- 系统主键（自增）
            eid VARCHAR(36) NOT NULL UNIQUE,                   -- 业务主键（UUID）
            post_id VARCHAR(36) NULL UNIQUE,                   -- 分析对象：帖子
            comment_id VARCHAR(36) NULL UNIQUE,                -- 分析对象：评论（与 post_id 二选一）
            text TEXT NOT NULL,                                -- 分析时的原文快照
            sentiment VARCHAR(32) NOT NULL,                    -- 情感标签
            confidence FLOAT NOT NULL,                         -- 置信度
            probabilities JSON,                                -- 各标签概率
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            CHECK ((post_id IS NULL) <> (comment_id IS NULL))
        );
    """

    __tablename__ = "emotions"

    _id = Column(Integer, primary_key=True, autoincrement=True)
    eid = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))

    post_id = Column(String(36), nullable=True)
    comment_id = Column(String(36), nullable=True)
    text = Column(Text, nullable=False)
    sentiment = Column(String(32), nullable=False)
    confidence = Column(Float, nullable=False)
    probabilities = Column(JSON, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), default=now_utc8)

    __table_args__ = (
        UniqueConstraint('eid', name='unique_eid'),
        UniqueConstraint('post_id', name='unique_emotion_post_id'),
        UniqueConstraint('comment_id', name='unique_emotion_comment_id'),
        CheckConstraint("(post_id IS NULL) <> (comment_id IS NULL)", name="ck_emotion_single_target"),
        Index("idx_emotions_sentiment", "sentiment"),
    )
