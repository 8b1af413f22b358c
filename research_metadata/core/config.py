from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="research-os-metadata", validation_alias="APP_NAME")
    app_env: str = Field(default="dev", validation_alias="APP_ENV")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    network_proxy_url: str | None = Field(default=None, validation_alias="NETWORK_PROXY_URL")

    metadata_fetch_timeout_seconds: int = Field(default=10, validation_alias="METADATA_FETCH_TIMEOUT_SECONDS")
    metadata_fetch_max_bytes: int = Field(default=2 * 1024 * 1024, validation_alias="METADATA_FETCH_MAX_BYTES")
    metadata_user_agent: str = Field(
        default="Mozilla/5.0 (compatible; ResearchOS/1.0)",
        validation_alias="METADATA_USER_AGENT",
    )

    oembed_timeout_seconds: int = Field(default=10, validation_alias="OEMBED_TIMEOUT_SECONDS")


settings = Settings()
