"""Configuration management for the restaurant review client using Pydantic."""

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Remote API Configuration
    api_base_url: str = Field(
        default="https://restaurant-api.dicoding.dev/",
        description="Base URL of the restaurant REST API",
    )
    api_auth_token: str | None = Field(
        default="12345", description="Token sent in the Authorization header"
    )
    image_base_url: str = Field(
        default="https://restaurant-api.dicoding.dev/images/large/",
        description="Base URL for restaurant pictures",
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="HTTP request timeout in seconds"
    )

    # Session Configuration
    restaurant_id: str = Field(
        default="uewq1zg2zlskfw1e867", description="Restaurant shown by default"
    )
    author_name: str = Field(
        default="Dicoding", description="Author name attached to submitted reviews"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_http_traffic: bool = Field(
        default=False, description="Log every HTTP request and response body"
    )

    def has_auth_token(self) -> bool:
        """Check if an API token is configured."""
        return bool(self.api_auth_token and self.api_auth_token.strip())

    def model_post_init(self, __context) -> None:
        """Validate configuration after initialization."""
        if not self.has_auth_token():
            logger.warning("API_AUTH_TOKEN not set - review submission will be rejected")


# Global config instance
config: Config | None = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global config
    if config is None:
        config = Config()
    return config


def setup_logging(cfg: Config | None = None) -> None:
    """Configure logging for the application."""
    if cfg is None:
        cfg = get_config()

    log_level = getattr(logging, cfg.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from external libraries
    if not cfg.log_http_traffic:
        logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
