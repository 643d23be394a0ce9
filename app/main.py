# app/main.py
from __future__ import annotations

import logging
from functools import partial

from fastapi import FastAPI

from app.api.health import router as health_router
from app.api.market import router as market_router
from app.config.settings import get_settings
from app.services.coingecko import fetch_snapshot
from app.services.presentation import PresentationState

logger = logging.getLogger("crypto_prices.main")


app = FastAPI(title="Cryptocurrency Prices")

# Routers
app.include_router(health_router)
app.include_router(market_router)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Cryptocurrency Prices"}


@app.on_event("startup")
async def on_startup() -> None:
    settings = get_settings()

    # One fetch per application lifetime
    state = PresentationState()
    app.state.presentation = state
    app.state.presentation_task = state.start(
        partial(fetch_snapshot, settings.MARKET_PAGE_SIZE, settings.MARKET_PAGE)
    )
    logger.info(
        "market snapshot requested | per_page=%s | page=%s",
        settings.MARKET_PAGE_SIZE,
        settings.MARKET_PAGE,
    )


@app.on_event("shutdown")
async def on_shutdown() -> None:
    state = getattr(app.state, "presentation", None)
    if state is not None:
        state.teardown()
    app.state.presentation = None
    app.state.presentation_task = None
