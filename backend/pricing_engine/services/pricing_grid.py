"""Pricing grid lookup.

Made-to-measure suppliers publish blind and fabric prices as a width x drop
table. A size is priced at the first band at or above it in each direction;
sizes larger than the table use the last band.
"""

import logging
from typing import Optional

from ..models.grid import PricingGrid
from ..utils.money import clean_length
from .service_factory import service_factory
from .unit_converter import get_unit_converter

logger = logging.getLogger(__name__)


class PricingGridService:
    """Width x drop price lookup."""

    def lookup(self, grid: PricingGrid, width: float, drop: float) -> Optional[float]:
        """
        Price for a size from a pricing grid.

        Args:
            grid: Pricing grid
            width: Width in metres
            drop: Drop in metres

        Returns:
            Grid price, or None when the grid has no positive price for the size
        """
        converter = get_unit_converter()
        grid_width = clean_length(converter.from_metres(width, grid.unit))
        grid_drop = clean_length(converter.from_metres(drop, grid.unit))

        width_index = next(
            (i for i, column in enumerate(grid.width_columns) if column >= grid_width),
            len(grid.width_columns) - 1,
        )
        row = next(
            (row for row in grid.drop_rows if row.drop >= grid_drop),
            grid.drop_rows[-1],
        )

        if width_index >= len(row.prices):
            logger.warning(
                f"Pricing grid row for drop {row.drop}{grid.unit.value} has no price "
                f"for width column {grid.width_columns[width_index]}"
            )
            return None

        price = row.prices[width_index]
        logger.debug(
            f"Grid lookup {grid_width} x {grid_drop} {grid.unit.value} -> "
            f"column {grid.width_columns[width_index]}, row {row.drop}: {price}"
        )
        return price if price > 0 else None


@service_factory
def get_pricing_grid_service() -> PricingGridService:
    """Get PricingGridService singleton instance."""
    return PricingGridService()
