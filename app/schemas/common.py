from typing import List, Optional
from pydantic import BaseModel, ConfigDict


class BatchItemResult(BaseModel):
    """批量操作中单个对象的处理结果"""
    id: str
    ok: bool
    error: Optional[str] = None


class BatchOperationOut(BaseModel):
    """
    逐条处理的批量操作结果：
    - 单条失败只记录，不影响其他条目
    - items 按请求顺序返回每条的结果
    """
    total: int
    success_count: int
    failure_count: int
    items: List[BatchItemResult]

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_items(cls, items: List[BatchItemResult]) -> "BatchOperationOut":
        success = sum(1 for item in items if item.ok)
        return cls(
            total=len(items),
            success_count=success,
            failure_count=len(items) - success,
            items=items,
        )


class BulkOperationOut(BaseModel):
    """
    单条 SQL 完成的批量操作结果：
    - requested: 请求里的 id 数量
    - affected: 实际命中的行数（不存在的 id 直接忽略）
    """
    requested: int
    affected: int


class CodeNameOut(BaseModel):
    """枚举的 code + 显示名"""
    code: str
    display_name: str
