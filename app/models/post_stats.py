from sqlalchemy import Column, Integer, String, ForeignKey, Index, UniqueConstraint
from app.models.base import Base
import uuid

class PostStats(Base):
    """ 帖子统计表，存储帖子的浏览数和评论数。
        计数只通过统计仓库的自增/自减接口维护，热路径上不做 COUNT(*) 重算。

        CREATE TABLE IF NOT EXISTS post_stats (
            _id INT AUTO_INCREMENT PRIMARY KEY,                -- 系统主键（自增）
            psid VARCHAR(36) NOT NULL UNIQUE,                  -- 业务主键（UUID，对外使用）
            post_id VARCHAR(36) NOT NULL UNIQUE,               -- 帖子业务主键（FK -> posts.pid）
            view_count INT DEFAULT 0,                          -- 浏览数
            comment_count INT DEFAULT 0,                       -- 帖子评论数
            FOREIGN KEY (post_id) REFERENCES posts(pid)        -- 外键关联到帖子表
        );
    """

    __tablename__ = "post_stats"

    # 系统主键（自增）
    _id = Column(Integer, primary_key=True, autoincrement=True)
    # 业务主键（UUID，对外使用）
    psid = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))
    # 帖子 ID
    post_id = Column(String(36), ForeignKey("posts.pid"), nullable=False)
    # 浏览数
    view_count = Column(Integer, nullable=False, default=0)
    # 评论数
    comment_count = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint('psid', name='unique_psid'),
        UniqueConstraint('post_id', name='unique_post_stats_post_id'),
        Index("idx_post_stats_post_id", "post_id"),
    )
