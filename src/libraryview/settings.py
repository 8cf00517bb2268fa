"""Settings loader for the library server connection.

Loads the server location, request timeout and image host from environment
variables or a .env file.

Recognised keys (all optional):
- LIBRARYVIEW_SERVER_URL
- LIBRARYVIEW_REQUEST_TIMEOUT
- LIBRARYVIEW_IMAGE_BASE_URL
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SERVER_URL = "http://localhost:3000"
DEFAULT_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/"


class Settings(BaseSettings):
    """Connection settings for the library REST API.

    Loads values from ``LIBRARYVIEW_*`` environment variables or a .env file.
    """

    server_url: str = DEFAULT_SERVER_URL
    request_timeout: float = 30.0  # seconds, enforced by the httpx client
    image_base_url: str = DEFAULT_IMAGE_BASE_URL

    model_config = SettingsConfigDict(
        env_prefix="LIBRARYVIEW_", env_file=".env", extra="ignore"
    )

    @field_validator("server_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("image_base_url")
    @classmethod
    def _ensure_trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else value + "/"
