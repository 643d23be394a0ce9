from __future__ import annotations

from fastapi import APIRouter, Request

from app.config.settings import get_settings
from app.schemas.market import TableView
from app.services.presentation import PresentationState
from app.services.table_view import build_table_view


router = APIRouter(prefix="/market", tags=["market"])


def get_presentation_state(request: Request) -> PresentationState:
    state = getattr(request.app.state, "presentation", None)
    if state is None:
        # Not started yet (no startup hook ran): show the idle placeholder table.
        state = PresentationState()
    return state


@router.get("/table", response_model=TableView)
async def get_market_table(request: Request) -> TableView:
    """
    Current prices table: placeholders while loading, rows once loaded,
    or the error message with an empty table.
    Example: /market/table
    """
    state = get_presentation_state(request)
    return build_table_view(state, placeholder_rows=get_settings().PLACEHOLDER_ROWS)
