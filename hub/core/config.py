"""
Application Configuration
Values are loaded from environment variables and an optional .env file
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Application
    app_name: str = Field("2B Hub", alias="APP_NAME")
    app_version: str = Field("1.0.0", alias="APP_VERSION")
    debug: bool = Field(False, alias="DEBUG")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Database
    database_url: str = Field("sqlite:///./hub.db", alias="DATABASE_URL")

    # Security
    jwt_secret: str = Field("hub_dev_secret_change_me", alias="JWT_SECRET")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    token_expire_days: int = Field(7, alias="TOKEN_EXPIRE_DAYS")
    auth_cookie_name: str = Field("auth-token", alias="AUTH_COOKIE_NAME")
    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")

    # CORS
    allowed_origins: str = Field("*", alias="ALLOWED_ORIGINS")

    # Catalog defaults
    default_kdv_percent: float = Field(20, alias="DEFAULT_KDV_PERCENT")
    default_profit_percent: float = Field(35, alias="DEFAULT_PROFIT_PERCENT")

    # Seed
    seed_admin_username: str = Field("admin", alias="SEED_ADMIN_USERNAME")
    seed_admin_password: str = Field("admin123", alias="SEED_ADMIN_PASSWORD")

    @property
    def origins(self) -> List[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Settings singleton"""
    return Settings()
