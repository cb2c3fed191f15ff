from typing import List, Optional

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "SessionLog"
    VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"

    # --- Environment & Debug ---
    ENVIRONMENT: str = "local"
    DEBUG: bool = False  # Default to False for security
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None  # e.g. "logs/sessionlog.log"

    # --- Security ---
    SECRET_KEY: Optional[SecretStr] = Field(
        default=None, validate_default=True
    )  # For JWT signing; loaded from .env
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # --- Proxy ---
    TRUSTED_PROXIES: List[str] = Field(
        default_factory=lambda: ["127.0.0.1", "10.0.0.0/8", "172.16.0.0/12", "192.168.0.0/16"],
        description="CIDR ranges of trusted reverse proxies for X-Forwarded-For",
    )

    # --- CORS ---
    ALLOWED_ORIGINS: List[str] = Field(
        default_factory=list,
        validate_default=True,
        description="List of allowed CORS origins. Configure in .env",
    )

    # --- Database Config ---
    DATABASE_URL: str = "sqlite:///./sessionlog.db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_PRE_PING: bool = True
    AUTO_CREATE_TABLES: bool = False  # Prefer `alembic upgrade head`

    # --- User log (session audit) listing ---
    AUDIT_DEFAULT_PAGE_SIZE: int = 20
    AUDIT_MAX_PAGE_SIZE: int = 100
    AUDIT_TOTAL_ESTIMATED: bool = False  # Use catalog estimate on PostgreSQL

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def default_allowed_origins(
        cls, v: Optional[List[str]], info: ValidationInfo
    ) -> Optional[List[str]]:
        env = info.data.get("ENVIRONMENT") or "local"
        if env != "production":
            if v is None:
                return ["http://localhost:5173", "http://localhost:3000"]
            if isinstance(v, str) and v.strip() in ("", "[]"):
                return ["http://localhost:5173", "http://localhost:3000"]
            if isinstance(v, list) and len(v) == 0:
                return ["http://localhost:5173", "http://localhost:3000"]
        return v

    @field_validator("SECRET_KEY", mode="before")
    @classmethod
    def validate_secret_key(
        cls, v: Optional[SecretStr], info: ValidationInfo
    ) -> Optional[SecretStr]:
        # Require a SECRET_KEY for non-local deployments
        env = info.data.get("ENVIRONMENT") or "local"
        if env != "local" and not v:
            raise ValueError(
                "SECRET_KEY must be set in environment for non-local deployments"
            )
        return v

    @field_validator("AUDIT_MAX_PAGE_SIZE", mode="after")
    @classmethod
    def validate_max_page_size(cls, v: int, info: ValidationInfo) -> int:
        default_size = info.data.get("AUDIT_DEFAULT_PAGE_SIZE") or 1
        if v < default_size:
            raise ValueError(
                "AUDIT_MAX_PAGE_SIZE must be >= AUDIT_DEFAULT_PAGE_SIZE"
            )
        return v


settings = Settings()
