# app/scripts/show_prices.py
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from functools import partial
from typing import Optional, Sequence

from app.config.settings import get_settings
from app.services.coingecko import fetch_snapshot
from app.services.presentation import Phase, PresentationState
from app.services.table_view import build_table_view, render_text_table


async def run_once(limit: int, page: int, fetcher=None) -> PresentationState:
    state = PresentationState()
    await state.load(fetcher or partial(fetch_snapshot, limit, page))
    return state


def _positive_int(value: str) -> int:
    parsed = int(value)
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return parsed


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Show top cryptocurrencies by market cap")
    parser.add_argument("--limit", type=_positive_int, default=settings.MARKET_PAGE_SIZE)
    parser.add_argument("--page", type=_positive_int, default=settings.MARKET_PAGE)
    parser.add_argument("--json", action="store_true", help="print the table view as JSON")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s | %(message)s",
    )

    state = asyncio.run(run_once(args.limit, args.page))
    view = build_table_view(state, placeholder_rows=settings.PLACEHOLDER_ROWS)

    if args.json:
        print(json.dumps(view.model_dump(), indent=2))
    else:
        print(render_text_table(view))

    return 0 if state.phase is Phase.LOADED else 1


if __name__ == "__main__":
    sys.exit(main())
