"""Unit tests for PricingGridService and grid-priced treatments."""

import pytest
from pydantic import ValidationError

from pricing_engine.models import (
    GridDropRow,
    LengthUnit,
    OptionPricingMethod,
    PricingGrid,
    TreatmentOption,
)
from pricing_engine.services.pricing_grid import PricingGridService, get_pricing_grid_service
from pricing_engine.services.treatment_cost import get_treatment_cost_service

pytestmark = pytest.mark.unit


@pytest.fixture
def grid_service() -> PricingGridService:
    return get_pricing_grid_service()


@pytest.fixture
def grid() -> PricingGrid:
    """Centimetre grid: widths 100-500, drops 150/250/300."""
    return PricingGrid(
        width_columns=[100, 200, 300, 400, 500],
        drop_rows=[
            GridDropRow(drop=150, prices=[50, 80, 110, 140, 170]),
            GridDropRow(drop=250, prices=[60, 95, 130, 165, 200]),
            GridDropRow(drop=300, prices=[70, 110, 150, 190, 230]),
        ],
        unit=LengthUnit.CENTIMETRE,
    )


@pytest.fixture
def grid_window(scenario_window, grid):
    """Scenario curtains priced from the fabric's grid."""
    fabric = scenario_window.fabric.model_copy(update={"pricing_grid": grid})
    return scenario_window.model_copy(update={"fabric": fabric, "pricing_method": "pricing_grid"})


class TestLookup:
    """Band selection."""

    def test_exact_band(self, grid_service, grid):
        assert grid_service.lookup(grid, 4.0, 2.5) == 165

    def test_size_rounds_up_to_next_band(self, grid_service, grid):
        assert grid_service.lookup(grid, 1.01, 1.2) == 80

    def test_smallest_size_uses_first_band(self, grid_service, grid):
        assert grid_service.lookup(grid, 0.3, 0.5) == 50

    def test_size_beyond_table_uses_last_band(self, grid_service, grid):
        assert grid_service.lookup(grid, 6.0, 3.2) == 230

    def test_millimetre_grid(self, grid_service):
        grid = PricingGrid(
            width_columns=[1000, 2000],
            drop_rows=[GridDropRow(drop=2000, prices=[100, 150]), GridDropRow(drop=3000, prices=[120, 180])],
            unit=LengthUnit.MILLIMETRE,
        )

        assert grid_service.lookup(grid, 1.5, 2.5) == 180

    def test_zero_price_is_no_price(self, grid_service):
        grid = PricingGrid(width_columns=[100], drop_rows=[GridDropRow(drop=100, prices=[0])])

        assert grid_service.lookup(grid, 0.5, 0.5) is None

    def test_short_row_is_no_price(self, grid_service):
        grid = PricingGrid(width_columns=[100, 200], drop_rows=[GridDropRow(drop=100, prices=[40])])

        assert grid_service.lookup(grid, 1.5, 0.5) is None

    def test_bands_must_ascend(self):
        with pytest.raises(ValidationError):
            PricingGrid(width_columns=[200, 100], drop_rows=[GridDropRow(drop=100, prices=[1, 2])])

        with pytest.raises(ValidationError):
            PricingGrid(
                width_columns=[100],
                drop_rows=[GridDropRow(drop=200, prices=[1]), GridDropRow(drop=100, prices=[2])],
            )


class TestGridPricedFabric:
    """Fabric line priced from a grid."""

    def test_grid_uses_made_up_width_and_finished_drop(self, grid_window, profile):
        """4.0 m made-up width (2.0 m rail at fullness 2) x 2.5 m drop -> 165, plus 50 make-up."""
        result = get_treatment_cost_service().calculate(grid_window, profile)

        fabric_line = result.breakdown[0]
        assert fabric_line.unit == "item"
        assert fabric_line.quantity == 1
        assert fabric_line.total == 165.0
        assert fabric_line.source == "selected"
        assert result.fabric_cost == 165.0
        assert result.total_cost == 215.0

    def test_grid_miss_prices_per_metre(self, grid_window, profile):
        empty = PricingGrid(width_columns=[100], drop_rows=[GridDropRow(drop=100, prices=[0])])
        window = grid_window.model_copy(
            update={"fabric": grid_window.fabric.model_copy(update={"pricing_grid": empty})}
        )

        result = get_treatment_cost_service().calculate(window, profile)

        assert result.breakdown[0].unit == "m"
        assert result.fabric_cost == 388.40

    def test_fabric_without_grid_prices_per_metre(self, scenario_window, profile):
        window = scenario_window.model_copy(update={"pricing_method": "pricing_grid"})

        result = get_treatment_cost_service().calculate(window, profile)

        assert result.fabric_cost == 388.40
        assert result.total_cost == 438.40

    def test_percentage_option_follows_grid_fabric_cost(self, grid_window, profile):
        window = grid_window.model_copy(
            update={"options": [TreatmentOption(name="Pattern matching", price=10, pricing_method="percentage")]}
        )

        result = get_treatment_cost_service().calculate(window, profile)

        assert result.options_cost == 16.5


class TestGridPricedOption:
    """Options priced from their own grid."""

    def test_option_uses_rail_width_and_drop(self, scenario_window, profile, grid):
        option = TreatmentOption(
            name="Motorised track", price=25, pricing_method=OptionPricingMethod.PRICING_GRID, pricing_grid=grid,
        )
        window = scenario_window.model_copy(update={"options": [option]})

        result = get_treatment_cost_service().calculate(window, profile)

        # 2.0 m rail x 2.5 m drop
        assert result.options_cost == 95.0
        assert result.breakdown[-1].unit == "item"

    def test_option_without_grid_price_charges_fixed_price(self, scenario_window, profile):
        option = TreatmentOption(name="Motorised track", price=25, pricing_method=OptionPricingMethod.PRICING_GRID)
        window = scenario_window.model_copy(update={"options": [option]})

        result = get_treatment_cost_service().calculate(window, profile)

        assert result.options_cost == 25.0
        assert result.total_cost == 463.40
