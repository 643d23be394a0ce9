from __future__ import annotations

from typing import List

from tabulate import tabulate

from app.schemas.market import MarketAsset, TableRow, TableView
from app.services.formatting import format_change, format_currency, format_symbol
from app.services.presentation import Phase, PresentationState

DEFAULT_PLACEHOLDER_ROWS = 10

COLUMNS = ("Rank", "Name", "Symbol", "Price (USD)", "24h Change (%)")


def _row(asset: MarketAsset) -> TableRow:
    change = format_change(asset.change_percent_24h)
    return TableRow(
        rank=asset.rank,
        name=asset.name,
        symbol=format_symbol(asset.symbol),
        icon_url=asset.icon_url,
        price=format_currency(asset.price_usd),
        change=f"{change.text}%",
        trend=change.trend.value,
    )


def build_table_view(state: PresentationState, placeholder_rows: int = DEFAULT_PLACEHOLDER_ROWS) -> TableView:
    """Map the current phase to what the table should show.

    Loading (and the brief idle moment before it) shows a fixed number of
    placeholder rows; a failure shows the message above an empty table.
    """
    phase = state.phase

    if phase is Phase.LOADED:
        return TableView(status=phase.value, rows=[_row(a) for a in state.snapshot or ()])

    if phase is Phase.FAILED:
        return TableView(status=phase.value, message=state.message)

    return TableView(status=phase.value, placeholders=placeholder_rows)


def render_text_table(view: TableView) -> str:
    if view.placeholders:
        body: List[List[str]] = [["..."] * len(COLUMNS) for _ in range(view.placeholders)]
    else:
        body = [[str(r.rank), r.name, r.symbol, r.price, r.change] for r in view.rows]

    table = tabulate(
        body,
        headers=list(COLUMNS),
        colalign=("left", "left", "left", "right", "right"),
        disable_numparse=True,
    )
    if view.message:
        return f"{view.message}\n{table}"
    return table
