from typing import Optional, Protocol, Dict

from app.schemas.emotion import EmotionCreate, EmotionOut

class IEmotionRepository(Protocol):
    """
    情感分析缓存仓库：每个帖子 / 评论最多一条，写入后只读
    """

    def get_by_post_id(self, post_id: str) -> Optional[EmotionOut]:
        ...

    def get_by_comment_id(self, comment_id: str) -> Optional[EmotionOut]:
        ...

    def create(self, data: EmotionCreate) -> EmotionOut:
        """写入缓存；同一目标已存在时抛出 sqlalchemy IntegrityError"""
        ...

    def count_post_sentiments_by_author(self, author_id: str) -> Dict[str, int]:
        """某作者所有帖子的情感标签计数"""
        ...

    def count_comment_sentiments_by_user(self, user_id: str) -> Dict[str, int]:
        """某用户所有评论的情感标签计数"""
        ...
