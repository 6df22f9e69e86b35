"""Identity service: configuration via pydantic-settings."""

from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class TokenSettings(BaseModel):
    """Snapshot of token signing configuration, built once at startup."""

    secret_key: str = Field(min_length=1)
    algorithm: str = "HS256"
    expiration_minutes: int = Field(gt=0)

    model_config = {"frozen": True}


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./data/identity.sqlite3"

    # Security (secret and expiry are required, no defaults)
    SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int
    BCRYPT_ROUNDS: int = 12

    # Bootstrap admin (optional)
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_NAME: str = "Admin"
    ADMIN_PASSWORD: Optional[str] = None

    # HTTP
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("SECRET_KEY")
    @classmethod
    def _secret_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("SECRET_KEY must not be empty")
        return value

    @field_validator("JWT_EXPIRATION_MINUTES")
    @classmethod
    def _expiry_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("JWT_EXPIRATION_MINUTES must be positive")
        return value

    def token_settings(self) -> TokenSettings:
        return TokenSettings(
            secret_key=self.SECRET_KEY,
            algorithm=self.JWT_ALGORITHM,
            expiration_minutes=self.JWT_EXPIRATION_MINUTES,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
