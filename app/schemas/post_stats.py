from pydantic import BaseModel, ConfigDict


class PostStatsOut(BaseModel):
    """
    帖子统计信息
    """
    psid: str
    post_id: str
    view_count: int = 0
    comment_count: int = 0

    model_config = ConfigDict(from_attributes=True)
