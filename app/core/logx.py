import logging
import sys

from app.core.config import settings

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] %(message)s"


def setup_logging() -> logging.Logger:
    """
    初始化项目日志：
    - 输出到 stdout
    - 降低 sqlalchemy / uvicorn.access 的噪音
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    _logger = logging.getLogger("schoolwall")
    _logger.setLevel(logging.DEBUG if settings.DEBUG else level)

    if not _logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _logger.addHandler(handler)
    _logger.propagate = False

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return _logger


logger = setup_logging()
