"""Unit tests for FabricCalculatorService."""

import pytest

from pricing_engine.models import (
    AllowanceDefaults,
    FabricItem,
    HeadingSelection,
    Measurement,
)
from pricing_engine.services.fabric_calculator import (
    FabricCalculatorService,
    get_fabric_calculator,
)
from pricing_engine.utils import ErrorCode, InvalidFabricWidthError

pytestmark = pytest.mark.unit


@pytest.fixture
def calculator() -> FabricCalculatorService:
    return get_fabric_calculator()


@pytest.fixture
def defaults() -> AllowanceDefaults:
    return AllowanceDefaults()


class TestStandardOrientation:
    """Vertical fabric, widths joined side by side."""

    def test_widths_required_rounds_up(self, calculator, defaults, scenario_measurement, scenario_fabric):
        """200 cm rail at fullness 2.0 on 140 cm fabric needs 3 widths."""
        req = calculator.calculate(scenario_measurement, scenario_fabric, defaults)

        assert req.required_width == 4.0
        assert req.widths_required == 3

    def test_linear_metres_with_seams_and_waste(self, calculator, defaults, scenario_measurement, scenario_fabric):
        req = calculator.calculate(scenario_measurement, scenario_fabric, defaults)

        assert req.total_drop_per_width == 2.73
        assert req.seam_allowance_total == 0.03
        assert req.linear_metres_base == 8.22
        assert req.linear_metres == 8.631

    def test_single_width_has_no_seam(self, calculator, defaults, scenario_fabric):
        measurement = Measurement(rail_width=0.6, drop=2.0, seam_hem=0.015, fullness_ratio=2.0)

        req = calculator.calculate(measurement, scenario_fabric, defaults)

        assert req.widths_required == 1
        assert req.seam_allowance_total == 0.0

    def test_exact_multiple_does_not_round_up(self, calculator, defaults, scenario_fabric):
        """2.8 m required on 1.4 m fabric is exactly 2 widths."""
        measurement = Measurement(rail_width=1.4, drop=2.0, fullness_ratio=2.0)

        req = calculator.calculate(measurement, scenario_fabric, defaults)

        assert req.widths_required == 2
        assert req.leftover_width == 0.0

    def test_leftover_width(self, calculator, defaults, scenario_measurement, scenario_fabric):
        req = calculator.calculate(scenario_measurement, scenario_fabric, defaults)

        assert req.leftover_width == 0.2

    def test_profile_defaults_fill_missing_allowances(self, calculator, defaults, scenario_fabric):
        """Header and bottom hem default to 8 cm each."""
        measurement = Measurement(rail_width=2.0, drop=2.5)

        req = calculator.calculate(measurement, scenario_fabric, defaults)

        assert req.total_drop_per_width == 2.66
        assert req.fullness_ratio == 2.0

    def test_returns_overlap_and_side_hems_for_pair(self, calculator, defaults, scenario_fabric):
        measurement = Measurement(
            rail_width=2.0,
            drop=2.5,
            fullness_ratio=2.0,
            return_left=0.1,
            return_right=0.1,
            overlap=0.1,
            side_hem=0.05,
            panel_configuration="pair",
        )

        req = calculator.calculate(measurement, scenario_fabric, defaults)

        assert req.required_width == 4.5

    def test_single_curtain_ignores_overlap(self, calculator, defaults, scenario_fabric):
        measurement = Measurement(
            rail_width=2.0,
            drop=2.5,
            fullness_ratio=2.0,
            return_left=0.1,
            return_right=0.1,
            overlap=0.1,
            side_hem=0.05,
            panel_configuration="single",
        )

        req = calculator.calculate(measurement, scenario_fabric, defaults)

        assert req.required_width == 4.3


class TestHeadingAndRepeats:
    """Heading overrides and pattern repeats."""

    def test_heading_fullness_overrides_measurement(self, calculator, defaults, scenario_measurement, scenario_fabric):
        heading = HeadingSelection(name="Pinch pleat", fullness_ratio=2.5)

        req = calculator.calculate(scenario_measurement, scenario_fabric, defaults, heading)

        assert req.fullness_ratio == 2.5
        assert req.required_width == 5.0
        assert req.widths_required == 4

    def test_heading_extra_fabric_added_to_each_drop(self, calculator, defaults, scenario_measurement, scenario_fabric):
        heading = HeadingSelection(name="Goblet", extra_fabric=0.1)

        req = calculator.calculate(scenario_measurement, scenario_fabric, defaults, heading)

        assert req.total_drop_per_width == 2.83

    def test_vertical_repeat_rounds_drop_up(self, calculator, defaults, scenario_measurement):
        fabric = FabricItem(name="Damask", price_per_metre=60, width=1.4, vertical_repeat=0.64)

        req = calculator.calculate(scenario_measurement, fabric, defaults)

        assert req.total_drop_per_width == 3.2

    def test_horizontal_repeat_rounds_width_up(self, calculator, defaults, scenario_measurement):
        fabric = FabricItem(name="Stripe", price_per_metre=60, width=1.4, horizontal_repeat=0.7)

        req = calculator.calculate(scenario_measurement, fabric, defaults)

        assert req.required_width == 4.2
        assert req.widths_required == 3


class TestRailroaded:
    """Fabric turned sideways."""

    def test_wide_fabric_single_piece(self, calculator, defaults, scenario_measurement):
        measurement = scenario_measurement.model_copy(update={"orientation": "railroaded"})
        fabric = FabricItem(name="Wide sheer", price_per_metre=30, width=2.8)

        req = calculator.calculate(measurement, fabric, defaults)

        assert req.widths_required == 1
        assert req.linear_metres_base == 4.0
        assert req.linear_metres == 4.2

    def test_drop_wider_than_fabric_needs_two_pieces(self, calculator, defaults, scenario_measurement, scenario_fabric):
        measurement = scenario_measurement.model_copy(update={"orientation": "railroaded"})

        req = calculator.calculate(measurement, scenario_fabric, defaults)

        assert req.widths_required == 2
        assert req.linear_metres_base == 8.015


class TestEdgeCases:
    """Invalid fabric and incomplete measurements."""

    @pytest.mark.parametrize("width", [0.0, -1.4, 1e-7])
    def test_invalid_fabric_width_raises(self, calculator, defaults, scenario_measurement, width):
        fabric = FabricItem(id="bad", name="Broken", price_per_metre=10, width=width)

        with pytest.raises(InvalidFabricWidthError) as exc_info:
            calculator.calculate(scenario_measurement, fabric, defaults)

        assert exc_info.value.error_code == ErrorCode.INVALID_FABRIC_WIDTH
        assert exc_info.value.details["fabric_id"] == "bad"

    @pytest.mark.parametrize("repeat_field", ["horizontal_repeat", "vertical_repeat"])
    def test_sub_micrometre_repeat_is_no_repeat(
        self, calculator, defaults, scenario_measurement, scenario_fabric, repeat_field
    ):
        fabric = scenario_fabric.model_copy(update={repeat_field: 1e-7})

        req = calculator.calculate(scenario_measurement, fabric, defaults)

        assert req == calculator.calculate(scenario_measurement, scenario_fabric, defaults)

    @pytest.mark.parametrize("rail_width,drop", [(0.0, 2.5), (2.0, 0.0), (-1.0, 2.5), (2.0, -0.5)])
    def test_incomplete_measurement_returns_zero(self, calculator, defaults, scenario_fabric, rail_width, drop):
        measurement = Measurement(rail_width=rail_width, drop=drop)

        req = calculator.calculate(measurement, scenario_fabric, defaults)

        assert req.widths_required == 0
        assert req.linear_metres == 0.0
        assert req.fabric_width == 1.4

    def test_same_input_same_output(self, calculator, defaults, scenario_measurement, scenario_fabric):
        first = calculator.calculate(scenario_measurement, scenario_fabric, defaults)
        second = calculator.calculate(scenario_measurement, scenario_fabric, defaults)

        assert first == second
