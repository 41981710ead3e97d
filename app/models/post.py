from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP, Text, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from typing import Optional
from app.models.base import Base
from app.core.time import now_utc8
import uuid
from enum import Enum

# 帖子状态，数据库里按字符串 code 存储
class PostStatus(str, Enum):
    DRAFT = "DRAFT"            # 草稿
    PUBLISHED = "PUBLISHED"    # 已发布
    HIDDEN = "HIDDEN"          # 已隐藏
    DELETED = "DELETED"        # 已删除

    @property
    def code(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return _STATUS_NAMES[self]

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional["PostStatus"]:
        """精确匹配，找不到返回 None，由调用方决定是否报错"""
        if code is None:
            return None
        for status in cls:
            if status.value == code:
                return status
        return None


_STATUS_NAMES = {
    PostStatus.DRAFT: "草稿",
    PostStatus.PUBLISHED: "已发布",
    PostStatus.HIDDEN: "已隐藏",
    PostStatus.DELETED: "已删除",
}


# 帖子分类（固定集合，不支持后台配置）
class PostCategory(str, Enum):
    ACADEMIC = "academic"
    CAMPUS_LIFE = "campus_life"
    CLUB_ACTIVITY = "club_activity"
    JOB_INTERN = "job_intern"
    SECONDHAND = "secondhand"
    LOST_FOUND = "lost_found"
    DORMITORY = "dormitory"
    DINING = "dining"
    STUDY_GROUP = "study_group"
    COURSE_REVIEW = "course_review"
    SCHOLARSHIP = "scholarship"
    COMPETITION = "competition"
    VOLUNTEER = "volunteer"
    SPORTS = "sports"
    ENTERTAINMENT = "entertainment"
    TRAVEL = "travel"
    EMOTIONAL = "emotional"
    ANONYMOUS = "anonymous"
    NOTICE = "notice"
    OTHER = "other"

    @property
    def code(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return _CATEGORY_NAMES[self]

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional["PostCategory"]:
        """按 code 精确查找（区分大小写），找不到返回 None"""
        if code is None:
            return None
        for category in cls:
            if category.value == code:
                return category
        return None

    @classmethod
    def from_display_name(cls, display_name: Optional[str]) -> Optional["PostCategory"]:
        if display_name is None:
            return None
        for category, name in _CATEGORY_NAMES.items():
            if name == display_name:
                return category
        return None

    @classmethod
    def is_valid(cls, value: Optional[str]) -> bool:
        """code 或显示名任意一个能匹配即有效"""
        return cls.from_code(value) is not None or cls.from_display_name(value) is not None


_CATEGORY_NAMES = {
    PostCategory.ACADEMIC: "学术交流",
    PostCategory.CAMPUS_LIFE: "校园生活",
    PostCategory.CLUB_ACTIVITY: "社团活动",
    PostCategory.JOB_INTERN: "求职实习",
    PostCategory.SECONDHAND: "二手交易",
    PostCategory.LOST_FOUND: "失物招领",
    PostCategory.DORMITORY: "宿舍生活",
    PostCategory.DINING: "饮食推荐",
    PostCategory.STUDY_GROUP: "学习小组",
    PostCategory.COURSE_REVIEW: "课程评价",
    PostCategory.SCHOLARSHIP: "奖学金",
    PostCategory.COMPETITION: "竞赛信息",
    PostCategory.VOLUNTEER: "志愿活动",
    PostCategory.SPORTS: "体育运动",
    PostCategory.ENTERTAINMENT: "娱乐休闲",
    PostCategory.TRAVEL: "旅游出行",
    PostCategory.EMOTIONAL: "情感交流",
    PostCategory.ANONYMOUS: "匿名树洞",
    PostCategory.NOTICE: "通知公告",
    PostCategory.OTHER: "其他",
}


class Post(Base):
    """ 帖子表，存储帖子的标题、正文、状态、分类、置顶/推荐标记等信息。
        浏览数、评论数放在 post_stats 表，只通过统计仓库的自增/自减维护。

        CREATE TABLE IF NOT EXISTS posts (
            _id INT AUTO_INCREMENT PRIMARY KEY,           -- 系统主键ID（自增）
            pid VARCHAR(36) UNIQUE,                       -- 业务主键PID（UUID）
            title VARCHAR(255) NOT NULL,                  -- 标题
            content TEXT NOT NULL,                        -- 正文
            slug VARCHAR(128) UNIQUE NOT NULL,            -- URL 友好标识（由标题生成）
            author_id VARCHAR(36) NOT NULL,               -- 作者 ID（users.uid）
            status VARCHAR(20) DEFAULT 'DRAFT',           -- 状态（DRAFT / PUBLISHED / HIDDEN / DELETED）
            category VARCHAR(50),                         -- 分类 code
            tags VARCHAR(255),                            -- 标签，逗号分隔
            cover_image VARCHAR(255),                     -- 封面图
            is_top BOOLEAN DEFAULT FALSE,                 -- 是否置顶
            is_recommended BOOLEAN DEFAULT FALSE,         -- 是否推荐
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            published_at TIMESTAMP NULL                   -- 最近一次进入 PUBLISHED 的时间
        );

        -- 索引建议：
        -- 1) author_id：查询某个作者的帖子
        CREATE INDEX idx_posts_author_id ON posts (author_id);
        -- 2) status + category：前台按分类浏览、后台按状态/分类筛选
        CREATE INDEX idx_posts_status_category ON posts (status, category);
        -- 3) status + published_at：信息流按发布时间倒序
        CREATE INDEX idx_posts_status_published ON posts (status, published_at);
    """

    __tablename__ = "posts"

    # 系统主键：自增
    _id = Column(Integer, primary_key=True, autoincrement=True)  # 系统主键ID，系统用，不对外暴露
    # 业务主键：UUID，唯一且不自增
    pid = Column(String(36), unique=True, default=lambda: str(uuid.uuid4()))  # 帖子的业务主键（UUID形式）

    title = Column(String(255), nullable=False)                           # 标题
    content = Column(Text, nullable=False)                                # 正文
    slug = Column(String(128), nullable=False)                            # slug
    author_id = Column(String(36), nullable=False)                        # 作者 ID
    status = Column(String(20), nullable=False, default=PostStatus.DRAFT.value)  # 状态
    category = Column(String(50), nullable=True)                          # 分类 code
    tags = Column(String(255), nullable=True)                             # 标签
    cover_image = Column(String(255), nullable=True)                      # 封面图
    is_top = Column(Boolean, nullable=False, default=False)               # 是否置顶
    is_recommended = Column(Boolean, nullable=False, default=False)       # 是否推荐
    created_at = Column(TIMESTAMP(timezone=True), default=now_utc8)       # 创建时间
    updated_at = Column(TIMESTAMP(timezone=True), default=now_utc8, onupdate=now_utc8)  # 更新时间
    published_at = Column(TIMESTAMP(timezone=True), nullable=True)        # 发布时间

    # 单向引用：该帖子的作者（用户被删除后仍保留帖子，所以不建外键）
    author = relationship("User", primaryjoin="foreign(Post.author_id) == User.uid", viewonly=True)
    # 单向引用：该帖子的统计信息（浏览数、评论数）
    post_stats = relationship("PostStats", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        # 保证业务主键 pid 唯一
        UniqueConstraint('pid', name='unique_pid'),
        UniqueConstraint('slug', name='unique_slug'),
        # 索引与上面的 SQL 一致（让 ORM 自动建索引）
        Index("idx_posts_author_id", "author_id"),
        Index("idx_posts_status_category", "status", "category"),
        Index("idx_posts_status_published", "status", "published_at"),
    )

    @property
    def view_count(self) -> int:
        return self.post_stats.view_count if self.post_stats else 0

    @property
    def comment_count(self) -> int:
        return self.post_stats.comment_count if self.post_stats else 0

    @property
    def author_username(self) -> Optional[str]:
        return self.author.username if self.author else None

    @property
    def category_display_name(self) -> Optional[str]:
        category = PostCategory.from_code(self.category)
        return category.display_name if category else None
