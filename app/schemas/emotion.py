from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional, Dict


class EmotionCreate(BaseModel):
    """写入情感分析缓存（post_id 与 comment_id 二选一）"""
    post_id: Optional[str] = None
    comment_id: Optional[str] = None
    text: str
    sentiment: str
    confidence: float
    probabilities: Dict[str, float] = {}


class EmotionOut(BaseModel):
    eid: str
    post_id: Optional[str] = None
    comment_id: Optional[str] = None
    text: str
    sentiment: str
    confidence: float
    probabilities: Dict[str, float] = {}
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SentimentResult(BaseModel):
    """
    情感分析服务的返回：
        {"success": true, "sentiment": "...", "confidence": 0.9, "probabilities": {...}}
        {"success": false, "error": "..."}
    """
    success: bool
    sentiment: Optional[str] = None
    confidence: Optional[float] = None
    probabilities: Dict[str, float] = {}
    error: Optional[str] = None
