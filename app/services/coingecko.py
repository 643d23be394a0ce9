"""Helpers for interacting with the public CoinGecko API."""

from __future__ import annotations

import enum
import logging
from typing import Any, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from app.config.settings import MARKET_ORDER, VS_CURRENCY, get_settings
from app.schemas.market import MarketAsset, Snapshot

logger = logging.getLogger("crypto_prices.coingecko")

_ASSET_LIST = TypeAdapter(list[MarketAsset])


class FetchErrorKind(str, enum.Enum):
    NETWORK = "network"
    HTTP_STATUS = "http_status"
    DECODE = "decode"


class FetchError(RuntimeError):
    """A failed snapshot fetch. ``message`` is what the table shows."""

    kind: FetchErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetworkFetchError(FetchError):
    kind = FetchErrorKind.NETWORK

    def __init__(self, detail: str):
        super().__init__(f"Network error: {detail}")
        self.detail = detail


class HttpStatusFetchError(FetchError):
    kind = FetchErrorKind.HTTP_STATUS

    def __init__(self, status_code: int):
        super().__init__(f"Error: {status_code}")
        self.status_code = status_code


class DecodeFetchError(FetchError):
    kind = FetchErrorKind.DECODE

    def __init__(self, reason: str):
        super().__init__(f"Invalid response: {reason}")
        self.reason = reason


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    loc = "".join(f"[{part}]" if isinstance(part, int) else f".{part}" for part in first["loc"])
    summary = f"{loc.lstrip('.') or 'body'}: {first['msg']}"
    count = exc.error_count()
    if count > 1:
        summary += f" (+{count - 1} more)"
    return summary


def decode_snapshot(payload: Any) -> Snapshot:
    """Validate a decoded JSON body into a Snapshot, preserving provider order.

    Raises ``DecodeFetchError`` if the body is not a list of well-formed
    market records or if two records share a rank.
    """
    if not isinstance(payload, list):
        raise DecodeFetchError(f"expected a JSON array, got {type(payload).__name__}")

    try:
        assets = _ASSET_LIST.validate_python(payload)
    except ValidationError as exc:
        raise DecodeFetchError(_describe_validation_error(exc)) from exc

    seen: set[int] = set()
    for asset in assets:
        if asset.rank in seen:
            raise DecodeFetchError(f"duplicate market_cap_rank {asset.rank}")
        seen.add(asset.rank)

    return tuple(assets)


async def fetch_snapshot(
    limit: int = 10,
    page: int = 1,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> Snapshot:
    """Fetch one page of coins ordered by market cap and decode it.

    Exactly one request is made. There is no retry; failures surface as a
    ``FetchError`` subclass.
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")
    if isinstance(page, bool) or not isinstance(page, int) or page <= 0:
        raise ValueError(f"page must be a positive integer, got {page!r}")

    s = get_settings()
    params = {
        "vs_currency": VS_CURRENCY,
        "order": MARKET_ORDER,
        "per_page": limit,
        "page": page,
    }

    logger.debug("fetching market snapshot | url=%s | params=%s", s.COINGECKO_URL, params)
    try:
        if client is not None:
            response = await client.get(s.COINGECKO_URL, params=params)
        else:
            async with httpx.AsyncClient(follow_redirects=True) as own_client:
                response = await own_client.get(s.COINGECKO_URL, params=params)
    except httpx.RequestError as exc:
        logger.warning("market snapshot request failed | err=%s", exc)
        raise NetworkFetchError(str(exc) or type(exc).__name__) from exc

    if not response.is_success:
        logger.warning("market snapshot bad status | status=%s", response.status_code)
        raise HttpStatusFetchError(response.status_code)

    try:
        payload = response.json()
    except ValueError as exc:
        logger.warning("market snapshot body is not JSON | err=%s", exc)
        raise DecodeFetchError("body is not valid JSON") from exc

    try:
        snapshot = decode_snapshot(payload)
    except DecodeFetchError as exc:
        logger.warning("market snapshot decode failed | reason=%s", exc.reason)
        raise

    logger.info("market snapshot fetched | assets=%s | page=%s", len(snapshot), page)
    return snapshot
