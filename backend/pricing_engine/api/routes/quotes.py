"""Quote totals, discount preview and payment API routes."""

import logging
from typing import List, Optional
from fastapi import APIRouter
from pydantic import BaseModel, Field

from ...models import APIResponse, DiscountSpec, QuoteLineItem, QuoteRequest, QuoteTotals
from ...api.dependencies import PipelineDep, ProfileDep
from ...services.discount_engine import get_discount_engine
from ...services.payment import get_payment_calculator
from ...utils import log_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Quotes"])


# ============================================================================
# Request Models
# ============================================================================


class DiscountPreviewRequest(BaseModel):
    """Discount preview against already-computed totals."""

    totals: QuoteTotals = Field(..., description="Pre-discount totals from /quotes/totals")
    discount: Optional[DiscountSpec] = None
    line_items: List[QuoteLineItem] = Field(default_factory=list)


class PaymentRequest(BaseModel):
    """Payment summary request."""

    total: float = Field(..., ge=0, description="Final quote total")
    amount_paid: float = Field(0.0, ge=0)
    deposit_percentage: float = Field(0.0, ge=0, le=100)


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/quotes/totals",
    response_model=APIResponse,
    summary="Build quote lines and totals",
)
async def quote_totals(
    request: QuoteRequest,
    profile: ProfileDep,
    pipeline: PipelineDep,
) -> dict:
    """
    Price every window, add room products, apply markup, discount and tax.

    - **profile_id**: optional pricing profile
    - Returns per-window results, quote lines, totals and payment summary
    """
    try:
        snapshot = pipeline.build_quote(request, profile)
        return {
            "success": True,
            "message": f"Quote total {snapshot.totals.total} {snapshot.totals.currency}",
            "data": snapshot.model_dump(mode="json"),
        }
    except Exception as e:
        log_error(e, context="Quote totals")
        raise


@router.post(
    "/quotes/discount-preview",
    response_model=APIResponse,
    summary="Preview a discount",
)
async def discount_preview(request: DiscountPreviewRequest) -> dict:
    """
    Recalculate totals for a discount without rebuilding the quote.

    The discount is always applied to the pre-discount subtotal carried on
    `totals`, so previews can be repeated with different specs.
    """
    engine = get_discount_engine()
    totals = engine.apply_discount(request.totals, request.discount, request.line_items)
    amount = totals.discount.amount if totals.discount else 0.0

    return {
        "success": True,
        "message": f"Discount {amount} {totals.currency}",
        "data": {
            "amount": amount,
            "discounted_subtotal": totals.discounted_subtotal,
            "totals": totals.model_dump(mode="json"),
        },
    }


@router.post(
    "/quotes/payment",
    response_model=APIResponse,
    summary="Deposit and balance due",
)
async def payment_summary(request: PaymentRequest) -> dict:
    """
    Deposit amount, balance due and payment status for a quote total.
    """
    summary = get_payment_calculator().calculate_payment(
        request.total, request.amount_paid, request.deposit_percentage
    )
    return {
        "success": True,
        "message": f"Payment status: {summary.status}",
        "data": summary.model_dump(mode="json"),
    }
