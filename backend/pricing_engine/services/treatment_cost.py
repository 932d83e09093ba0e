"""Treatment cost calculation.

Prices one window treatment from its fabric requirement: fabric, lining,
manufacturing (from the profile's cost table), heading upcharge and options.
Every component becomes one immutable CostBreakdownLine rounded to cents, and
the treatment total is the sum of those lines, so any renderer that adds up
the breakdown gets the same figure as total_cost.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from ..models.breakdown import CostBreakdownLine, CostCategory
from ..models.pricing import (
    FabricRequirement,
    PricingWarning,
    TreatmentPricingResult,
    WindowTreatmentInput,
)
from ..models.profile import PricingProfile
from ..models.selection import FabricSource, OptionPricingMethod, TreatmentOption
from ..utils.errors import ERROR_MESSAGES, ErrorCode
from ..utils.money import clean_length, money_product, round_money, sum_money, to_decimal
from .fabric_calculator import ResolvedAllowances, get_fabric_calculator
from .pricing_grid import get_pricing_grid_service
from .service_factory import service_factory

logger = logging.getLogger(__name__)


def _money_terms(terms: Iterable[Tuple[float, float]]) -> float:
    """Sum of quantity x price pairs in decimal, rounded once to cents."""
    total = sum((to_decimal(q) * to_decimal(p) for q, p in terms), Decimal("0"))
    return round_money(total)


class TreatmentCostService:
    """Per-window cost calculator."""

    def resolve_fabric(self, window: WindowTreatmentInput, profile: PricingProfile) -> FabricSource:
        """Selected fabric, or the profile's fallback fabric when none is selected."""
        if window.fabric is not None:
            return FabricSource.selected(window.fabric)
        logger.warning(
            f"No fabric selected for window {window.id}; using fallback "
            f"'{profile.fallback_fabric.name}' from profile {profile.identifier}"
        )
        return FabricSource.fallback(profile.fallback_fabric)

    def calculate(self, window: WindowTreatmentInput, profile: PricingProfile) -> TreatmentPricingResult:
        """
        Price one window treatment.

        Args:
            window: Canonical window record (measurements in metres)
            profile: Pricing profile (manufacturing table, fallback fabric, allowances)

        Returns:
            TreatmentPricingResult with an itemised breakdown

        Raises:
            InvalidFabricWidthError: the fabric in use has a width of zero or less
        """
        warnings: List[PricingWarning] = []
        source = self.resolve_fabric(window, profile)
        fabric = source.fabric

        if source.is_fallback:
            warnings.append(
                PricingWarning(
                    code=ErrorCode.MISSING_FABRIC_SELECTION.value,
                    message=ERROR_MESSAGES[ErrorCode.MISSING_FABRIC_SELECTION],
                    item_id=window.id,
                )
            )

        requirement = get_fabric_calculator().calculate(
            window.measurement, fabric, profile.allowances, window.heading
        )

        if not window.measurement.is_complete:
            warnings.append(
                PricingWarning(
                    code=ErrorCode.INCOMPLETE_MEASUREMENT.value,
                    message=ERROR_MESSAGES[ErrorCode.INCOMPLETE_MEASUREMENT],
                    item_id=window.id,
                )
            )
            return self._incomplete_result(window, profile, source, requirement, warnings)

        breakdown = self.build_breakdown(window, profile, source, requirement)
        costs = {category: 0.0 for category in CostCategory}
        for line in breakdown:
            costs[line.category] = sum_money([costs[line.category], line.total])

        result = TreatmentPricingResult(
            treatment_id=window.id,
            status="complete",
            linear_metres=requirement.linear_metres,
            widths_required=requirement.widths_required,
            price_per_metre=fabric.price_per_metre,
            fabric_cost=costs[CostCategory.FABRIC],
            lining_cost=costs[CostCategory.LINING],
            manufacturing_cost=costs[CostCategory.MANUFACTURING],
            heading_cost=costs[CostCategory.HEADING],
            options_cost=costs[CostCategory.OPTION],
            total_cost=sum_money(line.total for line in breakdown),
            currency=profile.currency,
            fabric_source=source.kind,
            requirement=requirement,
            breakdown=tuple(breakdown),
            warnings=tuple(warnings),
        )
        logger.debug(f"Window {window.id} priced: {result.total_cost} {result.currency}")
        return result

    def build_breakdown(
        self,
        window: WindowTreatmentInput,
        profile: PricingProfile,
        source: FabricSource,
        requirement: FabricRequirement,
    ) -> List[CostBreakdownLine]:
        """Itemised cost lines in display order: fabric, lining, manufacturing, heading, options."""
        measurement = window.measurement
        fabric = source.fabric
        curtains = measurement.curtain_count
        linear = requirement.linear_metres
        lines: List[CostBreakdownLine] = []

        # Fabric
        grid_line = self._grid_fabric_line(window, source, requirement)
        if grid_line is not None:
            lines.append(grid_line)
        elif window.pricing_method == "per_sqm":
            waste = ResolvedAllowances(measurement, profile.allowances, window.heading).waste_percent
            area = clean_length(measurement.rail_width * measurement.drop * (1 + waste / 100))
            lines.append(
                CostBreakdownLine(
                    id="fabric",
                    category=CostCategory.FABRIC,
                    name=fabric.name,
                    description=f"{area} sqm @ {fabric.price_per_metre}/sqm",
                    quantity=area,
                    unit="sqm",
                    unit_price=fabric.price_per_metre,
                    total=money_product(area, fabric.price_per_metre),
                    source=source.kind,
                )
            )
        else:
            lines.append(
                CostBreakdownLine(
                    id="fabric",
                    category=CostCategory.FABRIC,
                    name=fabric.name,
                    description=(
                        f"{requirement.widths_required} width(s), {linear} m @ "
                        f"{fabric.price_per_metre}/m"
                    ),
                    quantity=linear,
                    unit="m",
                    unit_price=fabric.price_per_metre,
                    total=money_product(linear, fabric.price_per_metre),
                    source=source.kind,
                )
            )
        fabric_total = lines[0].total

        # Lining
        lining = window.lining
        if lining is not None:
            lines.append(
                CostBreakdownLine(
                    id="lining",
                    category=CostCategory.LINING,
                    name=f"{lining.type} lining",
                    description=(
                        f"{linear} m @ {lining.price_per_metre}/m + "
                        f"{curtains} x {lining.labour_per_curtain} labour"
                    ),
                    quantity=linear,
                    unit="m",
                    unit_price=lining.price_per_metre,
                    total=_money_terms(
                        [(linear, lining.price_per_metre), (curtains, lining.labour_per_curtain)]
                    ),
                )
            )

        # Manufacturing
        rate = profile.manufacturing_rate(window.manufacturing_type)
        manufacturing_total = _money_terms(
            [(1, rate.flat), (linear, rate.per_metre), (curtains, rate.per_curtain)]
        )
        lines.append(
            CostBreakdownLine(
                id="manufacturing",
                category=CostCategory.MANUFACTURING,
                name=f"{window.manufacturing_type.value.capitalize()} made",
                description=(
                    f"flat {rate.flat} + {rate.per_metre}/m + {rate.per_curtain}/curtain"
                ),
                quantity=1,
                unit="item",
                unit_price=manufacturing_total,
                total=manufacturing_total,
            )
        )

        # Heading
        heading = window.heading
        if heading is not None:
            lines.append(
                CostBreakdownLine(
                    id="heading",
                    category=CostCategory.HEADING,
                    name=heading.name,
                    description=(
                        f"{measurement.rail_width} m rail @ {heading.upcharge_per_metre}/m + "
                        f"{curtains} x {heading.upcharge_per_curtain}"
                    ),
                    quantity=measurement.rail_width,
                    unit="m",
                    unit_price=heading.upcharge_per_metre,
                    total=_money_terms(
                        [
                            (measurement.rail_width, heading.upcharge_per_metre),
                            (curtains, heading.upcharge_per_curtain),
                        ]
                    ),
                )
            )

        # Options
        for index, option in enumerate(window.options):
            lines.append(self._option_line(index, option, window, requirement, fabric_total))

        return lines

    def _grid_fabric_line(
        self,
        window: WindowTreatmentInput,
        source: FabricSource,
        requirement: FabricRequirement,
    ) -> Optional[CostBreakdownLine]:
        """Fabric line priced from the fabric's grid, or None to price by the metre."""
        if window.pricing_method != "pricing_grid":
            return None
        fabric = source.fabric
        if fabric.pricing_grid is None:
            logger.warning(
                f"Window {window.id} uses grid pricing but fabric '{fabric.name}' has no pricing grid; "
                f"pricing per metre"
            )
            return None

        # Made-up width (fullness and returns) against the finished drop
        width = requirement.required_width
        drop = window.measurement.drop
        price = get_pricing_grid_service().lookup(fabric.pricing_grid, width, drop)
        if price is None:
            logger.warning(
                f"No grid price for {width} x {drop} m on fabric '{fabric.name}'; pricing per metre"
            )
            return None

        total = round_money(to_decimal(price))
        return CostBreakdownLine(
            id="fabric",
            category=CostCategory.FABRIC,
            name=fabric.name,
            description=f"Grid price for {width} m x {drop} m",
            quantity=1,
            unit="item",
            unit_price=total,
            total=total,
            source=source.kind,
        )

    def option_quantity(
        self,
        option: TreatmentOption,
        window: WindowTreatmentInput,
        requirement: FabricRequirement,
    ) -> Tuple[float, str]:
        """Quantity and unit an option's price is multiplied by."""
        measurement = window.measurement
        method = option.pricing_method
        if method == OptionPricingMethod.PER_METRE:
            return measurement.rail_width, "m"
        if method == OptionPricingMethod.PER_SQM:
            return clean_length(measurement.rail_width * measurement.drop), "sqm"
        if method == OptionPricingMethod.PER_DROP:
            return measurement.drop, "m"
        if method == OptionPricingMethod.PER_PANEL:
            return measurement.curtain_count, "panel"
        if method == OptionPricingMethod.PER_WIDTH:
            return requirement.widths_required, "width"
        return 1, "item"

    def _option_line(
        self,
        index: int,
        option: TreatmentOption,
        window: WindowTreatmentInput,
        requirement: FabricRequirement,
        fabric_total: float,
    ) -> CostBreakdownLine:
        if option.pricing_method == OptionPricingMethod.PERCENTAGE:
            return CostBreakdownLine(
                id=f"option-{index}",
                category=CostCategory.OPTION,
                name=option.name,
                description=option.description or f"{option.price}% of fabric cost",
                quantity=option.price,
                unit="%",
                unit_price=fabric_total / 100,
                total=money_product(fabric_total, option.price / 100),
            )

        if option.pricing_method == OptionPricingMethod.PRICING_GRID:
            measurement = window.measurement
            price = None
            if option.pricing_grid is not None:
                price = get_pricing_grid_service().lookup(
                    option.pricing_grid, measurement.rail_width, measurement.drop
                )
            if price is None:
                logger.warning(f"No grid price for option '{option.name}'; charging its fixed price")
                price = option.price
            total = round_money(to_decimal(price))
            return CostBreakdownLine(
                id=f"option-{index}",
                category=CostCategory.OPTION,
                name=option.name,
                description=option.description or f"Grid price for {measurement.rail_width} m x {measurement.drop} m",
                quantity=1,
                unit="item",
                unit_price=total,
                total=total,
            )

        quantity, unit = self.option_quantity(option, window, requirement)
        return CostBreakdownLine(
            id=f"option-{index}",
            category=CostCategory.OPTION,
            name=option.name,
            description=option.description,
            quantity=quantity,
            unit=unit,
            unit_price=option.price,
            total=money_product(quantity, option.price),
        )

    def _incomplete_result(
        self,
        window: WindowTreatmentInput,
        profile: PricingProfile,
        source: FabricSource,
        requirement: FabricRequirement,
        warnings: List[PricingWarning],
    ) -> TreatmentPricingResult:
        logger.info(f"Window {window.id} has incomplete measurements; priced at zero")
        return TreatmentPricingResult(
            treatment_id=window.id,
            status="incomplete",
            linear_metres=0.0,
            widths_required=0,
            price_per_metre=source.fabric.price_per_metre,
            fabric_cost=0.0,
            lining_cost=0.0,
            manufacturing_cost=0.0,
            heading_cost=0.0,
            options_cost=0.0,
            total_cost=0.0,
            currency=profile.currency,
            fabric_source=source.kind,
            requirement=requirement,
            breakdown=(),
            warnings=tuple(warnings),
        )


@service_factory
def get_treatment_cost_service() -> TreatmentCostService:
    """Get TreatmentCostService singleton instance."""
    return TreatmentCostService()
