# app/config/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass


COINGECKO_MARKETS_URL = "https://api.coingecko.com/api/v3/coins/markets"
VS_CURRENCY = "usd"
MARKET_ORDER = "market_cap_desc"


def parse_str(value: str | None, default: str) -> str:
    if value is None or value.strip() == "":
        return default
    return value.strip()


def parse_positive_int(value: str | None, default: int, name: str) -> int:
    if value is None or value.strip() == "":
        return default
    parsed = int(value)
    if parsed <= 0:
        raise ValueError(f"{name} must be a positive integer, got {parsed}")
    return parsed


@dataclass(frozen=True)
class Settings:
    COINGECKO_URL: str
    MARKET_PAGE_SIZE: int
    MARKET_PAGE: int
    PLACEHOLDER_ROWS: int
    LOG_LEVEL: str

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            COINGECKO_URL=parse_str(os.getenv("COINGECKO_URL"), COINGECKO_MARKETS_URL),
            MARKET_PAGE_SIZE=parse_positive_int(os.getenv("MARKET_PAGE_SIZE"), 10, "MARKET_PAGE_SIZE"),
            MARKET_PAGE=parse_positive_int(os.getenv("MARKET_PAGE"), 1, "MARKET_PAGE"),
            PLACEHOLDER_ROWS=parse_positive_int(os.getenv("PLACEHOLDER_ROWS"), 10, "PLACEHOLDER_ROWS"),
            LOG_LEVEL=parse_str(os.getenv("LOG_LEVEL"), "INFO").upper(),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
