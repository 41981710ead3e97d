"""
应用配置文件
"""
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用配置（可通过环境变量或 .env 覆盖）"""

    # 应用基本配置
    APP_NAME: str = "School Wall"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # 数据库配置
    DB_HOST: str = "127.0.0.1"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = "root"
    DB_NAME: str = "school_wall"
    # 直接给出完整连接串时优先使用（例如测试用 sqlite）
    DB_URL: Optional[str] = None
    DB_ECHO: bool = False

    # JWT配置
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS配置
    CORS_ORIGINS: list = ["*"]

    # 情感分析服务
    SENTIMENT_API_URL: str = "http://localhost:5000/analyze_sentiment"
    SENTIMENT_TIMEOUT_SECONDS: float = 10.0

    # 分页
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    @property
    def DATABASE_URL(self) -> str:
        """获取数据库连接URL"""
        if self.DB_URL:
            return self.DB_URL
        return (
            f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset=utf8mb4"
        )

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
