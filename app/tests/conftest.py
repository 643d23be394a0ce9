from __future__ import annotations

import pytest

from app.config import settings as settings_module


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    for name in (
        "COINGECKO_URL",
        "MARKET_PAGE_SIZE",
        "MARKET_PAGE",
        "PLACEHOLDER_ROWS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    settings_module.reset_settings()
    yield
    settings_module.reset_settings()
