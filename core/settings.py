"""Application settings and shared constants."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = "Brew Manager"
    database_url: str = "sqlite:///./brew_manager.db"
    log_level: str = "INFO"

    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 480

    low_stock_threshold: float = 10
    allow_negative_material_stock: bool = False

    bootstrap_admin_name: str = "Admin"
    bootstrap_admin_email: str = "admin@brew.local"
    bootstrap_admin_password: str = "admin123"

    @field_validator("low_stock_threshold")
    @classmethod
    def validate_low_stock_threshold(cls, v: float) -> float:
        if v < 0:
            raise ValueError("low_stock_threshold must be zero or positive")
        return v

    @field_validator("access_token_expire_minutes")
    @classmethod
    def validate_token_lifetime(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("access_token_expire_minutes must be positive")
        return v

    @property
    def database_url_normalized(self) -> str:
        url = self.database_url.strip()
        if url.startswith("postgres://"):
            return "postgresql://" + url[len("postgres://"):]
        return url


@lru_cache
def get_settings() -> Settings:
    return Settings()
