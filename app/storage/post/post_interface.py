from typing import Optional, Protocol, List, Tuple, Dict, Any

from app.core.pagination import PageQuery, PageResponse
from app.schemas.post import PostOut

class IPostRepository(Protocol):
    """
    帖子仓库接口协议
    - 不做权限判断，权限由业务层负责
    - 浏览数 / 评论数由 IPostStatsRepository 维护，这里只负责读出来
    """

    def create_post(self, fields: Dict[str, Any]) -> PostOut:
        """创建帖子，同时初始化统计记录"""
        ...

    def get_post_by_pid(self, pid: str) -> Optional[PostOut]:
        """根据业务主键获取帖子（任意状态）"""
        ...

    def get_post_by_slug(self, slug: str) -> Optional[PostOut]:
        """根据 slug 获取帖子（任意状态）"""
        ...

    def update_post(self, pid: str, fields: Dict[str, Any]) -> Optional[PostOut]:
        """按字段更新帖子，未找到返回 None"""
        ...

    def delete_post(self, pid: str) -> bool:
        """物理删除帖子（统计记录一并删除），未找到返回 False"""
        ...

    def list_posts(
        self,
        query: PageQuery,
        sort_column: str,
        status: Optional[str] = None,
        category: Optional[str] = None,
        author_id: Optional[str] = None,
        keyword: Optional[str] = None,
    ) -> PageResponse[PostOut]:
        """
        分页查询帖子，所有过滤条件为空表示不过滤
        sort_column 已经过白名单校验
        """
        ...

    def list_flagged(self, flag: str, limit: int) -> List[PostOut]:
        """已发布且置顶（is_top）/ 推荐（is_recommended）的帖子，按发布时间倒序"""
        ...

    def count_by_category(self, status: Optional[str] = None) -> List[Tuple[Optional[str], int]]:
        """按分类统计帖子数"""
        ...
