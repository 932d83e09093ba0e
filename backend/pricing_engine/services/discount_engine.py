"""Quote discounts.

The discount is always taken off the net, pre-discount subtotal held on the
totals; applying another discount spec starts again from those figures rather
than from an already-discounted total.

    base     = subtotal (all) | net fabric lines (fabric_only) | selected lines
    amount   = base * value / 100 (percentage) | min(value, base) (fixed)

Tax-inclusive:  net' = subtotal - amount; total' = net' * (1 + rate); tax' = total' - net'
Tax-exclusive:  subtotal' = subtotal - amount; tax' = subtotal' * rate; total' = subtotal' + tax'
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ..models.pricing import PricingWarning
from ..models.quote import (
    AppliedDiscount,
    DiscountScope,
    DiscountSpec,
    DiscountType,
    QuoteLineItem,
    QuoteTotals,
)
from ..utils.errors import ERROR_MESSAGES, ErrorCode
from ..utils.money import round_money, sum_money, to_decimal
from .markup_resolver import get_markup_resolver
from .service_factory import service_factory

logger = logging.getLogger(__name__)


class DiscountEngineService:
    """Applies a discount spec to quote totals."""

    def scoped_base(
        self,
        totals: QuoteTotals,
        spec: DiscountSpec,
        line_items: Sequence[QuoteLineItem],
    ) -> float:
        """Net amount the discount applies to."""
        if spec.scope == DiscountScope.FABRIC_ONLY:
            return sum_money(item.category_totals.get("fabric", 0.0) for item in line_items)
        if spec.scope == DiscountScope.SELECTED_ITEMS:
            selected = set(spec.selected_item_ids)
            return sum_money(item.total for item in line_items if item.id in selected)
        return totals.subtotal

    def calculate_discount_amount(self, spec: DiscountSpec, base: float) -> Tuple[float, bool]:
        """
        Discount amount for a base, without touching any totals.

        Returns:
            (amount, clamped); clamped is True when a fixed discount exceeded the base
        """
        if base <= 0:
            return 0.0, spec.type == DiscountType.FIXED and spec.value > 0
        if spec.type == DiscountType.PERCENTAGE:
            return round_money(to_decimal(base) * to_decimal(spec.value) / 100), False
        if spec.value > base:
            return round_money(base), True
        return round_money(spec.value), False

    def apply_discount(
        self,
        totals: QuoteTotals,
        spec: Optional[DiscountSpec],
        line_items: Sequence[QuoteLineItem],
    ) -> QuoteTotals:
        """
        Apply a discount to pre-discount totals.

        Args:
            totals: Totals from the aggregator (subtotal is net, pre-discount)
            spec: Discount to apply; None removes any discount
            line_items: Quote lines, needed for fabric_only and selected_items scopes

        Returns:
            New QuoteTotals; the input is never modified
        """
        # Warnings from an earlier discount do not carry over
        warnings = [w for w in totals.warnings if w.code != ErrorCode.DISCOUNT_EXCEEDS_BASE.value]
        if spec is None or spec.value == 0:
            return self._recompute(totals, 0.0, None, warnings)

        base = self.scoped_base(totals, spec, line_items)
        amount, clamped = self.calculate_discount_amount(spec, base)

        if clamped:
            logger.warning(f"Fixed discount {spec.value} exceeds discountable amount {base}; capped")
            warnings.append(
                PricingWarning(
                    code=ErrorCode.DISCOUNT_EXCEEDS_BASE.value,
                    message=ERROR_MESSAGES[ErrorCode.DISCOUNT_EXCEEDS_BASE],
                )
            )

        applied = AppliedDiscount(
            type=spec.type,
            value=spec.value,
            scope=spec.scope,
            scoped_base=base,
            amount=amount,
            clamped=clamped,
        )
        return self._recompute(totals, amount, applied, warnings)

    def _recompute(
        self,
        totals: QuoteTotals,
        amount: float,
        applied: Optional[AppliedDiscount],
        warnings: List[PricingWarning],
    ) -> QuoteTotals:
        net = round_money(to_decimal(totals.subtotal) - to_decimal(amount))
        rate = to_decimal(totals.tax_rate)

        if totals.tax_inclusive:
            total = round_money(to_decimal(net) * (1 + rate))
            tax_amount = round_money(to_decimal(total) - to_decimal(net))
        else:
            tax_amount = round_money(to_decimal(net) * rate)
            total = sum_money([net, tax_amount])

        profit_total = round_money(to_decimal(net) - to_decimal(totals.cost_total))
        return totals.model_copy(
            update={
                "tax_amount": tax_amount,
                "total": total,
                "discount": applied,
                "selling_total": net,
                "profit_total": profit_total,
                "gross_margin_percent": get_markup_resolver().calculate_gross_margin(
                    totals.cost_total, net
                ),
                "warnings": tuple(warnings),
            }
        )


@service_factory
def get_discount_engine() -> DiscountEngineService:
    """Get DiscountEngineService singleton instance."""
    return DiscountEngineService()


def calculate_discount_amount(spec: DiscountSpec, base: float) -> float:
    """Discount amount for a UI preview (clamped for fixed discounts)."""
    amount, _ = get_discount_engine().calculate_discount_amount(spec, base)
    return amount
