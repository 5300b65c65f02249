"""
Configuration management with pydantic-settings.

Every environment variable is validated at startup. Scraper headers,
selector locale tokens and opportunity-engine constants live here so
they can be tuned per marketplace without code changes.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Database ──────────────────────────────────────────────────────
    database_url: str = Field(
        default="sqlite+aiosqlite:///./market_signals.db",
        description="Async connection string (sqlite+aiosqlite://... or postgresql+asyncpg://...)",
    )

    # ── Notifications ─────────────────────────────────────────────────
    slack_webhook_url: str = Field(
        default="",
        description="Slack incoming webhook URL for real-time alerts.",
    )

    # ── Scraper ───────────────────────────────────────────────────────
    scraper_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        ),
    )
    scraper_accept_language: str = Field(default="ja,en-US;q=0.9,en;q=0.8")
    scraper_impersonate: str = Field(
        default="chrome120",
        description="curl_cffi browser fingerprint to impersonate.",
    )
    request_timeout: float = Field(default=30.0)
    bot_block_status_codes: list[int] = Field(default=[503])
    marketplace_base_url: str = Field(
        default="https://www.amazon.co.jp",
        description="Origin used for the critical-reviews page when the product URL has none.",
    )
    review_scan_limit: int = Field(default=6, ge=1)
    histogram_star_tokens: list[str] = Field(default=["star", "つ星"])
    deep_fetch_star_threshold: float = Field(
        default=4.0,
        description="Deep fetch fires when the best visible review is rated at or above this.",
    )
    max_concurrent_fetches: int = Field(default=4, ge=1)

    # ── Opportunity engine ────────────────────────────────────────────
    fallback_target_price: float = Field(default=2980.0)
    currency_symbol: str = Field(default="¥")
    major_brands: list[str] = Field(
        default=["Sony", "Panasonic", "Samsung", "Anker", "Apple"],
    )
    ranking_simulation_seed: int | None = Field(
        default=None,
        description="Seed for the simulated ranking source (None = nondeterministic).",
    )


# Singleton instance — import this everywhere
settings = Settings()
