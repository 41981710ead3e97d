from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


class BizResponse(JSONResponse):
    """
    统一业务响应体：
        {"code": 200, "msg": "success", "data": ...}
    code 与 HTTP 状态码保持一致
    """

    def __init__(
        self,
        data: Any = None,
        msg: str = "success",
        status_code: int = 200,
        headers: Optional[dict] = None,
    ):
        content = {
            "code": status_code,
            "msg": msg,
            "data": jsonable_encoder(data),
        }
        super().__init__(content=content, status_code=status_code, headers=headers)
