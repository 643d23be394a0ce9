"""Pydantic models for the ranked market snapshot and its table view."""

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class MarketAsset(BaseModel):
    """One ranked entry of the CoinGecko ``/coins/markets`` payload."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        allow_inf_nan=False,
        strict=True,
    )

    rank: int = Field(..., gt=0, alias="market_cap_rank")
    name: str = Field(..., min_length=1)
    symbol: str
    price_usd: float = Field(..., ge=0, alias="current_price")
    change_percent_24h: float = Field(..., alias="price_change_percentage_24h")
    icon_url: str = Field(..., alias="image")


# Ordered, immutable batch produced by one successful fetch.
Snapshot = Tuple[MarketAsset, ...]


class TableRow(BaseModel):
    rank: int
    name: str
    symbol: str
    icon_url: str
    price: str
    change: str
    trend: str


class TableView(BaseModel):
    """What a renderer needs to draw the prices table for the current phase."""

    status: str
    message: Optional[str] = None
    placeholders: int = 0
    rows: List[TableRow] = Field(default_factory=list)
