"""Quotation aggregation.

Turns priced windows and room products into quote lines and quote totals.

For each item: cost -> markup -> gross selling price. When the quote stores
prices tax-inclusive, the net figure is extracted here and only here:

    net = gross / (1 + tax_rate)

Line totals are rounded to cents and the subtotal is the sum of the rounded
lines. Tax is then charged on the net subtotal with the same formula in both
modes:

    tax_amount = subtotal * tax_rate
    total      = subtotal + tax_amount
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..models.markup import MarkupResult, MarkupSource
from ..models.pricing import PricingWarning, TreatmentPricingResult, WindowTreatmentInput
from ..models.quote import QuoteLineItem, QuoteSettings, QuoteTotals, RoomProduct
from ..utils.errors import ERROR_MESSAGES, ErrorCode
from ..utils.money import round_money, sum_money, to_decimal
from .markup_resolver import get_markup_resolver
from .service_factory import service_factory

logger = logging.getLogger(__name__)

PricedWindow = Tuple[WindowTreatmentInput, TreatmentPricingResult]


class QuotationAggregatorService:
    """Builds quote lines and quote-level totals."""

    def extract_net(self, gross: float, settings: QuoteSettings) -> float:
        """Net amount for a gross selling figure (unrounded)."""
        if not settings.tax_inclusive:
            return gross
        return float(to_decimal(gross) / (1 + to_decimal(settings.tax_rate)))

    def build_window_line(
        self,
        window: WindowTreatmentInput,
        result: TreatmentPricingResult,
        settings: QuoteSettings,
    ) -> Tuple[QuoteLineItem, List[PricingWarning]]:
        """Quote line for one priced window."""
        resolver = get_markup_resolver()
        fabric = window.fabric
        subcategory = window.subcategory or (fabric.subcategory if fabric else None)
        grid_markup = fabric.pricing_grid_markup if fabric else None

        markup = resolver.resolve_markup(
            window.markup_override, window.category, subcategory, grid_markup, settings.markup
        )

        gross = resolver.apply_markup(result.total_cost, markup.percentage)
        net_total = round_money(self.extract_net(gross, settings))

        category_totals: Dict[str, float] = {}
        for line in result.breakdown:
            line_net = self.extract_net(resolver.apply_markup(line.total, markup.percentage), settings)
            key = line.category.value
            category_totals[key] = sum_money([category_totals.get(key, 0.0), round_money(line_net)])

        item = QuoteLineItem(
            id=window.id,
            name=window.name,
            kind="window",
            cost_total=result.total_cost,
            gross_selling_total=round_money(gross),
            total=net_total,
            markup_percentage=markup.percentage,
            markup_source=markup.source,
            category_totals=category_totals,
            gross_margin_percent=resolver.calculate_gross_margin(result.total_cost, net_total),
        )
        return item, self._markup_warnings(markup, item)

    def build_room_product_line(
        self, product: RoomProduct, settings: QuoteSettings
    ) -> Tuple[QuoteLineItem, List[PricingWarning]]:
        """Quote line for a flat-priced room product."""
        resolver = get_markup_resolver()
        cost = round_money(to_decimal(product.unit_cost) * to_decimal(product.quantity))

        if product.unit_selling_price is not None:
            gross = float(to_decimal(product.unit_selling_price) * to_decimal(product.quantity))
            implied = (gross - cost) / cost * 100 if cost > 0 else 0.0
            markup = MarkupResult(
                percentage=round(implied, 2),
                source=MarkupSource.ITEM_OVERRIDE,
                source_name="Selling price",
            )
        else:
            markup = resolver.resolve_markup(
                product.markup_override, product.category, product.subcategory, None, settings.markup
            )
            gross = resolver.apply_markup(cost, markup.percentage)

        net_total = round_money(self.extract_net(gross, settings))
        category = (product.category or "product").lower()

        item = QuoteLineItem(
            id=product.id,
            name=product.name,
            kind="room_product",
            room_id=product.room_id,
            cost_total=cost,
            gross_selling_total=round_money(gross),
            total=net_total,
            markup_percentage=markup.percentage,
            markup_source=markup.source,
            category_totals={category: net_total},
            gross_margin_percent=resolver.calculate_gross_margin(cost, net_total),
        )
        return item, self._markup_warnings(markup, item)

    def calculate_totals(
        self,
        line_items: Sequence[QuoteLineItem],
        settings: QuoteSettings,
        warnings: Iterable[PricingWarning] = (),
    ) -> QuoteTotals:
        """Quote totals from already-built lines (no discount)."""
        subtotal = sum_money(item.total for item in line_items)
        tax_amount = round_money(to_decimal(subtotal) * to_decimal(settings.tax_rate))
        total = sum_money([subtotal, tax_amount])
        cost_total = sum_money(item.cost_total for item in line_items)
        profit_total = round_money(to_decimal(subtotal) - to_decimal(cost_total))

        return QuoteTotals(
            subtotal=subtotal,
            tax_rate=settings.tax_rate,
            tax_amount=tax_amount,
            total=total,
            tax_inclusive=settings.tax_inclusive,
            currency=settings.currency,
            cost_total=cost_total,
            selling_total=subtotal,
            profit_total=profit_total,
            gross_margin_percent=get_markup_resolver().calculate_gross_margin(cost_total, subtotal),
            warnings=tuple(warnings),
        )

    def aggregate(
        self,
        priced_windows: Sequence[PricedWindow],
        room_products: Sequence[RoomProduct],
        settings: QuoteSettings,
        warnings: Optional[Iterable[PricingWarning]] = None,
    ) -> Tuple[Tuple[QuoteLineItem, ...], QuoteTotals]:
        """
        Build all quote lines and the pre-discount totals.

        Args:
            priced_windows: (window input, pricing result) pairs
            room_products: Flat-priced room products
            settings: Quote settings snapshot (tax rate, inclusive flag, markup)
            warnings: Warnings already collected upstream, carried onto the totals

        Returns:
            (line items, totals)
        """
        collected: List[PricingWarning] = list(warnings or [])
        line_items: List[QuoteLineItem] = []

        for window, result in priced_windows:
            item, item_warnings = self.build_window_line(window, result, settings)
            line_items.append(item)
            collected.extend(item_warnings)

        for product in room_products:
            item, item_warnings = self.build_room_product_line(product, settings)
            line_items.append(item)
            collected.extend(item_warnings)

        totals = self.calculate_totals(line_items, settings, collected)
        logger.debug(
            f"Aggregated {len(line_items)} line(s): subtotal {totals.subtotal}, "
            f"tax {totals.tax_amount}, total {totals.total} {totals.currency}"
        )
        return tuple(line_items), totals

    def _markup_warnings(self, markup: MarkupResult, item: QuoteLineItem) -> List[PricingWarning]:
        if markup.is_unresolved and item.cost_total > 0:
            logger.warning(f"No markup rule for {item.kind} {item.id}; selling at cost")
            return [
                PricingWarning(
                    code=ErrorCode.UNRESOLVED_MARKUP.value,
                    message=ERROR_MESSAGES[ErrorCode.UNRESOLVED_MARKUP],
                    item_id=item.id,
                )
            ]
        return []


@service_factory
def get_quotation_aggregator() -> QuotationAggregatorService:
    """Get QuotationAggregatorService singleton instance."""
    return QuotationAggregatorService()
