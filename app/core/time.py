from datetime import datetime, timezone, timedelta
from typing import Optional

def now_utc8():
    """返回东八区的当前时间"""
    return datetime.now(timezone(timedelta(hours=8)))

def as_naive(dt: Optional[datetime]) -> Optional[datetime]:
    """
    去掉时区信息，只保留东八区墙上时间
    数据库读回来的时间可能不带时区，比较前统一成 naive
    """
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone(timedelta(hours=8))).replace(tzinfo=None)
    return dt
