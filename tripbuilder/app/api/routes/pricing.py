"""Pricing endpoint - POST /pricing/quote."""

from typing import Annotated

from fastapi import APIRouter, Depends

from tripbuilder.app.adapters.catalog import get_catalog
from tripbuilder.app.api.auth import get_current_context
from tripbuilder.app.api.schemas import QuoteRequest
from tripbuilder.app.config import Settings, get_settings
from tripbuilder.app.db.context import RequestContext
from tripbuilder.app.models.catalog import CatalogSnapshot
from tripbuilder.app.models.itinerary import CostBreakdown
from tripbuilder.app.pricing.aggregator import PricingRules, calculate_cost_breakdown

router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.post("/quote", response_model=CostBreakdown)
def quote(
    request: QuoteRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    catalog: Annotated[CatalogSnapshot, Depends(get_catalog)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CostBreakdown:
    """Price day plans against the current catalog.

    Args:
        request: Client profile, day plans and profit margin
        ctx: Request context (user_id)
        catalog: Catalog snapshot
        settings: Pricing surcharges and default exchange rate

    Returns:
        Category and per-day breakdown with final prices
    """
    return calculate_cost_breakdown(
        request.client,
        request.day_plans,
        catalog,
        profit_margin=request.profit_margin,
        exchange_rate=request.exchange_rate,
        rules=PricingRules.from_settings(settings),
    )
