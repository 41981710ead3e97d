from sqlalchemy import Column, Integer, String, Boolean, Text, TIMESTAMP, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from datetime import timedelta
from typing import Optional
import uuid
from app.models.base import Base
from app.core.time import now_utc8, as_naive

# 评论采用 先发后审：用户评论直接展示，管理员可以隐藏（is_active=False）或删除（is_deleted=True）
# 删除/隐藏都不物理删除，前台展示时用占位文本替换正文，原文只在管理端可见

DELETED_PLACEHOLDER = "[此评论已被删除]"
HIDDEN_PLACEHOLDER = "[此评论已被隐藏]"

# 更新时间比创建时间晚超过该阈值才算“已编辑”
EDITED_THRESHOLD = timedelta(minutes=1)


def truncate_preview(content: Optional[str], max_length: int) -> Optional[str]:
    """截断长内容，超出部分用 ... 表示"""
    if content is None or len(content) <= max_length:
        return content
    return content[:max_length] + "..."


class Comment(Base):
    """ 评论表，二级结构：parent_comment_id 为空是顶级评论，否则是对某条评论的回复。

        CREATE TABLE IF NOT EXISTS comments (
            _id INT AUTO_INCREMENT PRIMARY KEY,               -- 系统主键（自增）
            cid VARCHAR(36) NOT NULL UNIQUE,                  -- 业务主键（UUID，对外使用）
            content TEXT NOT NULL,                            -- 评论正文
            user_id VARCHAR(36) NOT NULL,                     -- 评论作者（users.uid）
            post_id VARCHAR(36) NOT NULL,                     -- 所属帖子（posts.pid）
            parent_comment_id VARCHAR(36) NULL,               -- 父评论（comments.cid），只在创建时校验
            is_deleted BOOLEAN NOT NULL DEFAULT FALSE,        -- 是否已删除（软删除）
            is_active BOOLEAN NOT NULL DEFAULT TRUE,          -- 是否激活（管理员隐藏时为 FALSE）
            delete_reason VARCHAR(255) NULL,                  -- 删除 / 隐藏原因
            deleted_by VARCHAR(36) NULL,                      -- 删除操作者
            deleted_at TIMESTAMP NULL,                        -- 删除时间
            created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
        );

        -- 父评论被删除时不级联处理子评论，所以 parent_comment_id / post_id / user_id 都不建外键
        CREATE INDEX idx_comments_post_parent ON comments (post_id, parent_comment_id);
        CREATE INDEX idx_comments_parent ON comments (parent_comment_id);
        CREATE INDEX idx_comments_user ON comments (user_id);
    """

    __tablename__ = "comments"

    # 系统主键（自增）
    _id = Column(Integer, primary_key=True, autoincrement=True)
    # 业务主键（UUID，对外使用）
    cid = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))

    content = Column(Text, nullable=False)
    user_id = Column(String(36), nullable=False)
    post_id = Column(String(36), nullable=False)
    parent_comment_id = Column(String(36), nullable=True)

    is_deleted = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    delete_reason = Column(String(255), nullable=True)
    deleted_by = Column(String(36), nullable=True)
    deleted_at = Column(TIMESTAMP(timezone=True), nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=now_utc8)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=now_utc8)

    # 以下都是只读引用，方便渲染作者名、帖子标题、父评论预览
    author = relationship("User", primaryjoin="foreign(Comment.user_id) == User.uid", viewonly=True)
    post = relationship("Post", primaryjoin="foreign(Comment.post_id) == Post.pid", viewonly=True)
    parent = relationship(
        "Comment",
        primaryjoin="foreign(Comment.parent_comment_id) == remote(Comment.cid)",
        viewonly=True,
    )

    __table_args__ = (
        UniqueConstraint('cid', name='unique_cid'),
        Index("idx_comments_post_parent", "post_id", "parent_comment_id"),
        Index("idx_comments_parent", "parent_comment_id"),
        Index("idx_comments_user", "user_id"),
    )

    # ------------------------------ 派生属性 ------------------------------

    @property
    def is_edited(self) -> bool:
        created, updated = as_naive(self.created_at), as_naive(self.updated_at)
        if created is None or updated is None:
            return False
        return updated > created + EDITED_THRESHOLD

    @property
    def display_content(self) -> str:
        if self.is_deleted:
            return DELETED_PLACEHOLDER
        if self.is_active is False:
            return HIDDEN_PLACEHOLDER
        return self.content

    @property
    def status_description(self) -> str:
        if self.is_deleted:
            return "已删除"
        if self.is_active is False:
            return "已隐藏"
        return "正常"

    # ------------------------------ 状态变更 ------------------------------

    def mark_as_deleted(self, deleted_by: Optional[str], reason: Optional[str] = None) -> None:
        now = now_utc8()
        self.is_deleted = True
        self.deleted_by = deleted_by
        self.delete_reason = reason
        self.deleted_at = now
        self.updated_at = now

    def mark_as_inactive(self, reason: Optional[str] = None) -> None:
        self.is_active = False
        self.delete_reason = reason
        self.updated_at = now_utc8()

    def mark_as_active(self) -> None:
        self.is_active = True
        self.delete_reason = None
        self.updated_at = now_utc8()
