"""Application configuration pulled from environment variables via pydantic."""
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the weather report CLI."""
    model_config = SettingsConfigDict(
        env_prefix="REPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Credentials are not checked here; a missing key surfaces as a 401 from the provider.
    openweathermap_api_key: str | None = Field(
        default=None,
        validation_alias="OPENWEATHERMAP_API_KEY",
    )
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPEN_AI_API_KEY", "OPENAI_API_KEY"),
    )
    openweathermap_base_url: str = "https://api.openweathermap.org"
    request_timeout_seconds: float = 10.0
    log_level: str = "WARNING"

    @field_validator("openweathermap_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("log_level", mode="after")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        """Accept lower-case level names from the environment."""
        return str(v).upper()


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(
        f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'openweathermap_api_key', 'openai_api_key'})}"
    )
