"""Pricing pipeline.

Prices windows and builds complete quotes from one snapshot of inputs:

    windows -> treatment cost -> markup -> aggregation -> discount -> payment

Every call recomputes from its inputs; nothing is cached between calls.
"""

import logging
from typing import List, Optional

from ..models.pricing import (
    CalculationOutcome,
    PricingWarning,
    TreatmentPricingResult,
    WindowTreatmentInput,
)
from ..models.profile import PricingProfile
from ..models.quote import QuoteRequest, QuoteSnapshot
from ..utils.errors import APIError, log_error
from .discount_engine import get_discount_engine
from .payment import get_payment_calculator
from .quotation_aggregator import PricedWindow, get_quotation_aggregator
from .service_factory import service_factory
from .treatment_cost import get_treatment_cost_service

logger = logging.getLogger(__name__)


class PricingPipelineService:
    """Orchestrates window pricing and quote building."""

    def price_window(self, window: WindowTreatmentInput, profile: PricingProfile) -> TreatmentPricingResult:
        """
        Price one window.

        Raises:
            InvalidFabricWidthError: the fabric in use has a width of zero or less
        """
        return get_treatment_cost_service().calculate(window, profile)

    def try_price_window(
        self, window: WindowTreatmentInput, profile: PricingProfile
    ) -> CalculationOutcome[TreatmentPricingResult]:
        """Price one window, reporting failures as data instead of raising."""
        try:
            result = self.price_window(window, profile)
        except APIError as e:
            log_error(e, f"price_window {window.id}")
            return CalculationOutcome[TreatmentPricingResult](
                success=False,
                error_code=e.error_code.value,
                message=e.message,
                details=e.details if isinstance(e.details, dict) else None,
            )
        return CalculationOutcome[TreatmentPricingResult](success=True, data=result)

    def build_quote(self, request: QuoteRequest, profile: PricingProfile) -> QuoteSnapshot:
        """
        Build a full quote snapshot.

        Args:
            request: Windows, room products, settings, discount and payment inputs
            profile: Pricing profile used for every window

        Returns:
            QuoteSnapshot with per-window results, quote lines, final totals and payment

        Raises:
            InvalidFabricWidthError: any window's fabric has a width of zero or less
        """
        priced: List[PricedWindow] = []
        warnings: List[PricingWarning] = []
        for window in request.windows:
            result = self.price_window(window, profile)
            priced.append((window, result))
            warnings.extend(result.warnings)

        line_items, totals = get_quotation_aggregator().aggregate(
            priced, request.room_products, request.settings, warnings
        )
        totals = get_discount_engine().apply_discount(totals, request.discount, line_items)

        payment = None
        if request.amount_paid > 0 or request.deposit_percentage > 0:
            payment = get_payment_calculator().calculate_payment(
                totals.total, request.amount_paid, request.deposit_percentage
            )

        logger.info(
            f"Quote built with profile {profile.identifier}: {len(line_items)} line(s), "
            f"total {totals.total} {totals.currency}, {len(totals.warnings)} warning(s)"
        )
        return QuoteSnapshot(
            windows=tuple(result for _, result in priced),
            line_items=line_items,
            totals=totals,
            payment=payment,
        )

    def try_build_quote(
        self, request: QuoteRequest, profile: PricingProfile
    ) -> CalculationOutcome[QuoteSnapshot]:
        """Build a quote, reporting failures as data instead of raising."""
        try:
            snapshot = self.build_quote(request, profile)
        except APIError as e:
            log_error(e, "build_quote")
            return CalculationOutcome[QuoteSnapshot](
                success=False,
                error_code=e.error_code.value,
                message=e.message,
                details=e.details if isinstance(e.details, dict) else None,
            )
        return CalculationOutcome[QuoteSnapshot](success=True, data=snapshot)


@service_factory
def get_pricing_pipeline() -> PricingPipelineService:
    """Get PricingPipelineService singleton instance."""
    return PricingPipelineService()


def price_window(window: WindowTreatmentInput, profile: PricingProfile) -> TreatmentPricingResult:
    """Module-level shortcut for PricingPipelineService.price_window."""
    return get_pricing_pipeline().price_window(window, profile)


def try_price_window(
    window: WindowTreatmentInput, profile: PricingProfile
) -> CalculationOutcome[TreatmentPricingResult]:
    """Module-level shortcut for PricingPipelineService.try_price_window."""
    return get_pricing_pipeline().try_price_window(window, profile)


def build_quote(request: QuoteRequest, profile: Optional[PricingProfile] = None) -> QuoteSnapshot:
    """Build a quote; the built-in default profile is used when none is given."""
    return get_pricing_pipeline().build_quote(request, profile or PricingProfile())
