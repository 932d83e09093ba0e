"""Fabric requirement calculation.

Turns one window's measurements (metres) and a fabric into widths required and
linear metres to order.

Vertical (standard) orientation, fabric roll runs top to bottom:

    required_width   = rail_width * fullness + return_left + return_right
                       + overlap (pairs only) + side_hem * 2 * curtains
    widths_required  = max(1, ceil(required_width / fabric_width))
    drop_per_width   = drop + header + bottom_hem + pooling + heading extra
    seam_allowance   = (widths_required - 1) * seam_hem
    linear_base      = widths_required * drop_per_width + seam_allowance
    linear_metres    = linear_base * (1 + waste% / 100)

Railroaded orientation turns the roll sideways: the fabric width covers the
drop, so pieces = ceil(drop_per_width / fabric_width) and each piece is
required_width long.

Pattern repeats round the width up to whole horizontal repeats and each drop
up to whole vertical repeats.
"""

import logging
from typing import Optional

from ..models.measurement import Measurement
from ..models.pricing import FabricRequirement
from ..models.profile import AllowanceDefaults
from ..models.selection import FabricItem, HeadingSelection
from ..utils.errors import InvalidFabricWidthError
from ..utils.money import ceil_div, clean_length, round_up_to_multiple
from .service_factory import service_factory

logger = logging.getLogger(__name__)


class ResolvedAllowances:
    """Measurement allowances with profile defaults filled in."""

    __slots__ = (
        "header_allowance",
        "bottom_hem",
        "side_hem",
        "seam_hem",
        "return_left",
        "return_right",
        "overlap",
        "waste_percent",
        "fullness_ratio",
    )

    def __init__(
        self,
        measurement: Measurement,
        defaults: AllowanceDefaults,
        heading: Optional[HeadingSelection] = None,
    ):
        for name in self.__slots__:
            if name == "fullness_ratio":
                continue
            value = getattr(measurement, name)
            setattr(self, name, getattr(defaults, name) if value is None else value)

        # Heading fullness wins over the measurement, which wins over the profile
        if heading is not None and heading.fullness_ratio is not None:
            self.fullness_ratio = heading.fullness_ratio
        elif measurement.fullness_ratio is not None:
            self.fullness_ratio = measurement.fullness_ratio
        else:
            self.fullness_ratio = defaults.fullness_ratio


class FabricCalculatorService:
    """Fabric requirement calculator."""

    def calculate(
        self,
        measurement: Measurement,
        fabric: FabricItem,
        defaults: AllowanceDefaults,
        heading: Optional[HeadingSelection] = None,
    ) -> FabricRequirement:
        """
        Calculate the fabric requirement for one window.

        Args:
            measurement: Window measurements in metres
            fabric: Fabric being used (selected or fallback)
            defaults: Allowance defaults from the pricing profile
            heading: Optional heading (fullness override, extra fabric per drop)

        Returns:
            FabricRequirement; all zeros when rail width or drop is not positive

        Raises:
            InvalidFabricWidthError: fabric width is zero or negative
        """
        # Widths below the length precision clean to zero
        if clean_length(fabric.width) <= 0:
            raise InvalidFabricWidthError(fabric.width, fabric.id)

        allowances = ResolvedAllowances(measurement, defaults, heading)

        if not measurement.is_complete:
            logger.debug(
                f"Incomplete measurement (rail_width={measurement.rail_width}, "
                f"drop={measurement.drop}); returning zero requirement"
            )
            return FabricRequirement.empty(fabric.width, allowances.fullness_ratio)

        curtains = measurement.curtain_count
        overlap = allowances.overlap if curtains > 1 else 0.0

        required_width = (
            measurement.rail_width * allowances.fullness_ratio
            + allowances.return_left
            + allowances.return_right
            + overlap
            + allowances.side_hem * 2 * curtains
        )
        required_width = round_up_to_multiple(clean_length(required_width), fabric.horizontal_repeat)

        extra_fabric = heading.extra_fabric if heading is not None else 0.0
        drop_per_width = (
            measurement.drop
            + allowances.header_allowance
            + allowances.bottom_hem
            + measurement.pooling
            + extra_fabric
        )
        drop_per_width = round_up_to_multiple(clean_length(drop_per_width), fabric.vertical_repeat)

        if measurement.orientation == "railroaded":
            pieces = max(1, ceil_div(drop_per_width, fabric.width))
            seam_allowance = (pieces - 1) * allowances.seam_hem if pieces > 1 else 0.0
            linear_base = pieces * required_width + seam_allowance
            widths_required = pieces
            leftover = 0.0
        else:
            widths_required = max(1, ceil_div(required_width, fabric.width))
            seam_allowance = (
                (widths_required - 1) * allowances.seam_hem if widths_required > 1 else 0.0
            )
            linear_base = widths_required * drop_per_width + seam_allowance
            leftover = max(0.0, widths_required * fabric.width - required_width)

        linear_metres = linear_base * (1 + allowances.waste_percent / 100)

        requirement = FabricRequirement(
            required_width=clean_length(required_width),
            widths_required=widths_required,
            total_drop_per_width=clean_length(drop_per_width),
            seam_allowance_total=clean_length(seam_allowance),
            linear_metres_base=clean_length(linear_base),
            linear_metres=clean_length(linear_metres),
            fabric_width=fabric.width,
            fullness_ratio=allowances.fullness_ratio,
            leftover_width=clean_length(leftover),
        )

        logger.debug(
            f"Fabric requirement: {widths_required} width(s) x {requirement.total_drop_per_width}m "
            f"+ {requirement.seam_allowance_total}m seams = {requirement.linear_metres}m"
        )
        return requirement


@service_factory
def get_fabric_calculator() -> FabricCalculatorService:
    """Get FabricCalculatorService singleton instance."""
    return FabricCalculatorService()
