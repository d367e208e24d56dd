from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_PATH = PROJECT_ROOT / ".env"


def load_environment() -> None:
    """Load environment variables from the project .env file if it exists."""
    load_dotenv(dotenv_path=ENV_PATH, override=False)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    github_token: Optional[SecretStr] = None
    github_api_url: str = "https://api.github.com"
    github_graphql_url: Optional[str] = None
    batch_size: int = Field(25, ge=1, le=100)
    page_size: int = Field(100, ge=1, le=100)
    request_timeout_seconds: float = Field(30.0, gt=0.0)
    max_concurrency: int = Field(4, ge=1)
    user_agent: str = "github-connections"

    @field_validator("github_api_url", "github_graphql_url")
    def strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        return value.rstrip("/") if value else value

    @model_validator(mode="after")
    def derive_graphql_url(self) -> "Settings":
        if not self.github_graphql_url:
            self.github_graphql_url = f"{self.github_api_url}/graphql"
        return self

    def token_value(self) -> Optional[str]:
        if self.github_token is None:
            return None
        return self.github_token.get_secret_value().strip() or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_environment()
    return Settings()


__all__ = ["Settings", "get_settings", "load_environment", "PROJECT_ROOT"]
