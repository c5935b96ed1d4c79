"""CORS configuration with environment variable support."""

from functools import lru_cache
from typing import Annotated, Any, cast

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """CORS settings loaded from environment variables.

    Every ``cors_*`` field left unset keeps the protocol default: the
    ``Origin``, ``Access-Control-Request-Method`` and
    ``Access-Control-Request-Headers`` values are echoed back, and the
    optional headers are omitted.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # CORS headers
    cors_allow_origin: str | None = Field(default=None, alias="CORS_ALLOW_ORIGIN")
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: Annotated[list[str] | None, NoDecode] = Field(
        default=None, alias="CORS_ALLOW_METHODS"
    )
    cors_allow_headers: Annotated[list[str] | None, NoDecode] = Field(
        default=None, alias="CORS_ALLOW_HEADERS"
    )
    cors_expose_headers: Annotated[list[str] | None, NoDecode] = Field(
        default=None, alias="CORS_EXPOSE_HEADERS"
    )
    cors_max_age: int | None = Field(
        default=None,
        alias="CORS_MAX_AGE",
        description="Seconds a preflight result may be cached by the browser",
    )

    # CORS behaviour
    cors_catch_handler_errors: bool = Field(
        default=False,
        alias="CORS_CATCH_HANDLER_ERRORS",
        description="Convert handler failures into a bare 500 instead of propagating",
    )
    cors_merge_strategy: str = Field(
        default="overwrite",
        alias="CORS_MERGE_STRATEGY",
        description="How computed Access-Control-* headers combine with handler-set ones",
    )

    @field_validator(
        "cors_allow_methods", "cors_allow_headers", "cors_expose_headers", mode="before"
    )
    @classmethod
    def parse_comma_separated(cls, v: Any) -> list[str] | None:
        """Parse header lists from a comma-separated string or a list."""
        if v is None:
            return None
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return cast("list[str]", v)

    @field_validator("cors_max_age")
    @classmethod
    def validate_max_age(cls, v: int | None) -> int | None:
        """Validate max age is not negative."""
        if v is not None and v < 0:
            raise ValueError("CORS_MAX_AGE must be zero or a positive number of seconds")
        return v

    @field_validator("cors_merge_strategy")
    @classmethod
    def validate_merge_strategy(cls, v: str) -> str:
        """Validate merge strategy is supported."""
        allowed = ["overwrite", "append"]
        if v.lower() not in allowed:
            raise ValueError(f"CORS_MERGE_STRATEGY must be one of {allowed}")
        return v.lower()

    @model_validator(mode="after")
    def validate_production_wildcard(self) -> "Settings":
        """Reject a wildcard origin combined with credentials in production.

        Browsers refuse credentialed responses whose allowed origin is ``*``,
        so this combination is always a deployment mistake.
        """
        if self.is_production and self.cors_allow_origin == "*" and self.cors_allow_credentials:
            raise ValueError(
                "CORS_ALLOW_ORIGIN='*' cannot be combined with CORS_ALLOW_CREDENTIALS in production"
            )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
