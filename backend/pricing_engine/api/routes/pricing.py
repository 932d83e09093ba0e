"""Window pricing and markup API routes."""

import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter
from pydantic import BaseModel, Field

from ...models import APIResponse, MarkupSettings, WindowTreatmentInput
from ...api.dependencies import PipelineDep, ProfileDep
from ...services.markup_resolver import get_markup_resolver
from ...services.record_mapper import get_record_mapper
from ...utils import log_error, round_money

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Pricing"])


# ============================================================================
# Request Models
# ============================================================================


class RecordPricingRequest(BaseModel):
    """Raw stored window record plus the unit its lengths are in."""

    record: Dict[str, Any] = Field(..., description="Window record as stored (legacy keys accepted)")
    unit: str = Field("cm", description="Length unit of un-suffixed values, e.g. mm, cm, in")


class MarkupRequest(BaseModel):
    """Markup resolution request."""

    settings: MarkupSettings = Field(default_factory=MarkupSettings)
    item_override: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    subcategory: Optional[str] = None
    grid_markup: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0, description="Cost price to mark up")


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/pricing/treatments",
    response_model=APIResponse,
    summary="Price one window treatment",
)
async def price_treatment(
    window: WindowTreatmentInput,
    profile: ProfileDep,
    pipeline: PipelineDep,
) -> dict:
    """
    Price one window treatment from canonical (metre) measurements.

    - **profile_id**: optional pricing profile
    - Returns the fabric requirement, itemised breakdown and warnings
    """
    try:
        result = pipeline.price_window(window, profile)
        return {
            "success": True,
            "message": f"Window {window.id} priced ({result.status})",
            "data": result.model_dump(mode="json"),
        }
    except Exception as e:
        log_error(e, context=f"Price treatment: {window.id}")
        raise


@router.post(
    "/pricing/records",
    response_model=APIResponse,
    summary="Price a raw stored window record",
)
async def price_record(
    request: RecordPricingRequest,
    profile: ProfileDep,
    pipeline: PipelineDep,
) -> dict:
    """
    Normalise a stored record (legacy keys, any length unit) and price it.

    - **record**: raw window record
    - **unit**: unit of un-suffixed lengths
    """
    try:
        window = get_record_mapper().map_record(request.record, request.unit)
        result = pipeline.price_window(window, profile)
        return {
            "success": True,
            "message": f"Record {window.id} priced ({result.status})",
            "data": {
                "window": window.model_dump(mode="json"),
                "result": result.model_dump(mode="json"),
            },
        }
    except Exception as e:
        log_error(e, context="Price record")
        raise


@router.post(
    "/pricing/markup",
    response_model=APIResponse,
    summary="Resolve the effective markup",
)
async def resolve_markup(request: MarkupRequest) -> dict:
    """
    Resolve the markup for an item and, when a cost is given, its selling price.
    """
    resolver = get_markup_resolver()
    markup = resolver.resolve_markup(
        request.item_override,
        request.category,
        request.subcategory,
        request.grid_markup,
        request.settings,
    )

    data: Dict[str, Any] = {
        "markup": markup.model_dump(mode="json"),
        "unresolved": markup.is_unresolved,
    }
    if request.cost is not None:
        selling = round_money(resolver.apply_markup(request.cost, markup.percentage))
        data["cost"] = request.cost
        data["selling_price"] = selling
        data["gross_margin_percent"] = resolver.calculate_gross_margin(request.cost, selling)

    return {
        "success": True,
        "message": f"Markup {markup.percentage}% from {markup.source.value}",
        "data": data,
    }
