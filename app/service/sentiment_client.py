"""
情感分析服务客户端

外部服务约定：
    POST {SENTIMENT_API_URL}   body: {"text": "..."}
    成功: {"success": true, "sentiment": "positive", "confidence": 0.93, "probabilities": {...}}
    失败: {"success": false, "error": "..."}
"""
from typing import Optional

import httpx

from app.core.config import settings
from app.core.logx import logger
from app.core.exceptions import SentimentAnalysisError
from app.schemas.emotion import SentimentResult


class SentimentClient:
    """
    同步调用情感分析服务
    transport 可注入，测试时用 httpx.MockTransport 替换真实网络
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url or settings.SENTIMENT_API_URL
        self.timeout = timeout if timeout is not None else settings.SENTIMENT_TIMEOUT_SECONDS
        self._transport = transport

    def analyze(self, text: str) -> SentimentResult:
        """
        分析一段文本，失败统一抛 SentimentAnalysisError：
        - 网络错误 / 超时 / 非 2xx
        - 返回体不是约定格式
        - success=false
        """
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.url, json={"text": text})
                response.raise_for_status()
                result = SentimentResult.model_validate(response.json())
        except httpx.HTTPError as e:
            logger.error(f"Sentiment service request failed: {e}")
            raise SentimentAnalysisError(f"Sentiment service unavailable: {e}")
        except ValueError as e:
            # json 解析失败 / 字段校验失败
            logger.error(f"Sentiment service returned malformed body: {e}")
            raise SentimentAnalysisError("Sentiment service returned malformed response")

        if not result.success or result.sentiment is None or result.confidence is None:
            raise SentimentAnalysisError(result.error or "Sentiment analysis failed")
        return result


_client: Optional[SentimentClient] = None


def get_sentiment_client() -> SentimentClient:
    """FastAPI 依赖：进程内共用一个客户端配置"""
    global _client
    if _client is None:
        _client = SentimentClient()
    return _client
