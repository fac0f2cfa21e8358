"""Configuration settings for the site auditor."""

from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Crawler settings
    max_pages: int = Field(default=5, description="Maximum pages to crawl")
    links_per_page: int = Field(
        default=3,
        description="Maximum internal links queued from each crawled page",
    )
    request_timeout: float = Field(default=15.0, description="Request timeout in seconds")
    politeness_delay: float = Field(
        default=2.0,
        description="Delay in seconds before every fetch after the first",
    )
    rate_limit_backoff: float = Field(
        default=10.0,
        description="Seconds to wait before retrying a URL that answered HTTP 429",
    )
    user_agent: str = Field(
        default="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        description="User agent string (realistic browser UA)",
    )
    accept_language: str = Field(default="en-US,en;q=0.9", description="Accept-Language header")

    # Storage settings
    data_dir: Path = Field(default=Path("./data"), description="Directory for the JSON project store")

    # Market analysis settings
    include_market_size: bool = Field(
        default=False,
        description="Also run the market size dimension during analysis",
    )

    # Trigger API settings
    api_host: str = Field(default="127.0.0.1", description="Host for the analyze API")
    api_port: int = Field(default=8000, description="Port for the analyze API")

    model_config = {"env_prefix": "SITEAUDIT_", "env_file": ".env"}


settings = Settings()
