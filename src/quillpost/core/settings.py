"""Application settings and configuration.

This module defines all configuration options for the Quillpost application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Quillpost", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    port: int = Field(default=5000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Database configuration
    database_url: str = Field(default="sqlite:///./quillpost.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    auto_create_tables: bool = Field(default=True, alias="AUTO_CREATE_TABLES")

    # Image host used for cover images
    media_host_url: str | None = Field(default=None, alias="MEDIA_HOST_URL")
    media_host_api_key: str | None = Field(default=None, alias="MEDIA_HOST_API_KEY")
    media_host_api_secret: str | None = Field(default=None, alias="MEDIA_HOST_API_SECRET")
    media_folder: str = Field(default="blog-covers", alias="MEDIA_FOLDER")
    media_http_timeout_seconds: float = Field(
        default=15.0,
        alias="MEDIA_HTTP_TIMEOUT_SECONDS",
    )
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    allowed_image_types: list[str] = Field(
        default=["image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"],
        alias="ALLOWED_IMAGE_TYPES",
    )
    placeholder_cover_url: str = Field(
        default="https://placehold.co/1200x630?text=Draft",
        alias="PLACEHOLDER_COVER_URL",
    )

    # CORS configuration for the web client
    client_url: str = Field(default="http://localhost:3000", alias="CLIENT_URL")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def cors_origins(self) -> list[str]:
        """Return the allowed client origins as a list.

        ``CLIENT_URL`` may hold several comma-separated origins.
        """
        return [origin.strip() for origin in self.client_url.split(",") if origin.strip()]

    @property
    def media_host_configured(self) -> bool:
        """Return True when every credential for the image host is present."""
        return bool(
            self.media_host_url and self.media_host_api_key and self.media_host_api_secret
        )


settings = Settings()  # type: ignore[call-arg]
