"""Markup resolution.

Priority (first match wins):
    1. item override      any explicit value, 0 included
    2. pricing grid       > 0
    3. subcategory rule   > 0, looked up under the item's category
    4. category rule      > 0
    5. global default     0 when unset

Category and subcategory names are compared case-insensitively. The minimum
markup floor applies to every source except an explicit item override.
"""

import logging
from typing import Dict, Optional

from ..models.markup import MarkupResult, MarkupSettings, MarkupSource
from ..utils.money import to_decimal
from .service_factory import service_factory

logger = logging.getLogger(__name__)


def _lookup(rules: Dict[str, float], key: Optional[str]) -> Optional[float]:
    """Case-insensitive rule lookup; returns None when there is no positive rule."""
    if not key:
        return None
    wanted = key.strip().lower()
    for name, value in rules.items():
        if name.strip().lower() == wanted and value and value > 0:
            return value
    return None


def _lookup_nested(
    rules: Dict[str, Dict[str, float]], category: Optional[str], subcategory: Optional[str]
) -> Optional[float]:
    if not category or not subcategory:
        return None
    wanted = category.strip().lower()
    for name, subrules in rules.items():
        if name.strip().lower() == wanted:
            return _lookup(subrules, subcategory)
    return None


class MarkupResolverService:
    """Resolves the effective markup percentage for a quote item."""

    def resolve_markup(
        self,
        item_override: Optional[float],
        category: Optional[str],
        subcategory: Optional[str],
        grid_markup: Optional[float],
        settings: MarkupSettings,
    ) -> MarkupResult:
        """
        Resolve the markup for one item.

        Args:
            item_override: Explicit markup set on the item (None when absent)
            category: Item category, e.g. "curtains", "hardware"
            subcategory: Item subcategory, e.g. "curtain_fabric"
            grid_markup: Markup attached to the pricing grid in use
            settings: Markup settings snapshot

        Returns:
            MarkupResult with the percentage and where it came from
        """
        if item_override is not None:
            return MarkupResult(
                percentage=item_override,
                source=MarkupSource.ITEM_OVERRIDE,
                source_name="Item override",
            )

        if grid_markup is not None and grid_markup > 0:
            result = MarkupResult(
                percentage=grid_markup,
                source=MarkupSource.PRICING_GRID,
                source_name="Pricing grid",
            )
        else:
            sub_rule = _lookup_nested(settings.subcategory_markups, category, subcategory)
            category_rule = _lookup(settings.category_markups, category)
            if sub_rule is not None:
                result = MarkupResult(
                    percentage=sub_rule,
                    source=MarkupSource.SUBCATEGORY,
                    source_name=f"{category} / {subcategory}",
                )
            elif category_rule is not None:
                result = MarkupResult(
                    percentage=category_rule,
                    source=MarkupSource.CATEGORY,
                    source_name=str(category),
                )
            else:
                result = MarkupResult(
                    percentage=settings.default_markup_percentage or 0.0,
                    source=MarkupSource.DEFAULT,
                    source_name="Global default",
                )

        return self._apply_minimum(result, settings)

    def _apply_minimum(self, result: MarkupResult, settings: MarkupSettings) -> MarkupResult:
        minimum = settings.minimum_markup_percentage
        if minimum > 0 and result.percentage < minimum:
            logger.debug(
                f"Markup {result.percentage}% from {result.source.value} raised to minimum {minimum}%"
            )
            return MarkupResult(
                percentage=minimum,
                source=result.source,
                source_name=result.source_name,
                minimum_applied=True,
            )
        return result

    def apply_markup(self, cost: float, percentage: float) -> float:
        """Selling price for a cost marked up by `percentage` (unrounded)."""
        return float(to_decimal(cost) * (1 + to_decimal(percentage) / 100))

    def calculate_gross_margin(self, cost: float, selling: float) -> float:
        """Gross margin as a percentage of selling price; 0 when selling is not positive."""
        if selling <= 0:
            return 0.0
        return (selling - cost) / selling * 100


@service_factory
def get_markup_resolver() -> MarkupResolverService:
    """Get MarkupResolverService singleton instance."""
    return MarkupResolverService()


def resolve_markup(
    item_override: Optional[float],
    category: Optional[str],
    subcategory: Optional[str],
    grid_markup: Optional[float],
    settings: MarkupSettings,
) -> MarkupResult:
    """Module-level shortcut for MarkupResolverService.resolve_markup."""
    return get_markup_resolver().resolve_markup(
        item_override, category, subcategory, grid_markup, settings
    )


def apply_markup(cost: float, percentage: float) -> float:
    """Module-level shortcut for MarkupResolverService.apply_markup."""
    return get_markup_resolver().apply_markup(cost, percentage)


def calculate_gross_margin(cost: float, selling: float) -> float:
    """Module-level shortcut for MarkupResolverService.calculate_gross_margin."""
    return get_markup_resolver().calculate_gross_margin(cost, selling)
