import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Linear API
    LINEAR_API_KEY: str | None = None  # Personal API key (Authorization header)
    LINEAR_API_URL: str = "https://api.linear.app/graphql"
    LINEAR_TIMEOUT: float = 30.0

    # 工具调用时的默认值（可选）
    LINEAR_TEAM_ID: str | None = None
    LINEAR_PROJECT_ID: str | None = None

    # HTTP wrapper
    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 8002

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    def get_log_level(self) -> int:
        """将 LOG_LEVEL 转换为 logging 级别，无法识别时回退到 INFO"""
        level = logging.getLevelName(self.LOG_LEVEL.strip().upper())
        return level if isinstance(level, int) else logging.INFO


settings = Settings()
