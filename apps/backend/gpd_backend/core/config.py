from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    github_api_base_url: str = "https://api.github.com"
    github_api_version: str = "2022-11-28"
    github_page_size: int = Field(default=100, ge=1, le=100)

    repo_fetch_concurrency: int = Field(default=8, ge=1)  # Max concurrent per-repo PR listings

    # Dashboard account file; relative paths resolve against the working directory
    github_dashboard_config: str = "github-dashboard.yml"

    environment: str = "development"
    cors_origins: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env.local",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
