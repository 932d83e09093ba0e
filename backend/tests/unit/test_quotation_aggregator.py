"""Unit tests for QuotationAggregatorService."""

import pytest

from pricing_engine import config
from pricing_engine.models import MarkupSettings, MarkupSource, QuoteSettings, RoomProduct
from pricing_engine.services.quotation_aggregator import (
    QuotationAggregatorService,
    get_quotation_aggregator,
)
from pricing_engine.services.treatment_cost import get_treatment_cost_service
from pricing_engine.utils import ErrorCode
from pricing_engine.utils.money import round_money, to_decimal

pytestmark = pytest.mark.unit


@pytest.fixture
def aggregator() -> QuotationAggregatorService:
    return get_quotation_aggregator()


@pytest.fixture
def priced_window(scenario_window, profile):
    return scenario_window, get_treatment_cost_service().calculate(scenario_window, profile)


@pytest.fixture
def curtain_pole() -> RoomProduct:
    return RoomProduct(id="p1", name="Curtain pole", room_id="lounge", category="hardware", quantity=2, unit_cost=20)


class TestTaxExclusive:
    """Tax added on top of net selling prices."""

    def test_markup_and_tax(self, aggregator, priced_window, exclusive_settings):
        """438.40 cost at 25% = 548.00; 20% tax = 109.60; total 657.60."""
        line_items, totals = aggregator.aggregate([priced_window], [], exclusive_settings)

        assert line_items[0].total == 548.0
        assert line_items[0].markup_source == MarkupSource.DEFAULT
        assert totals.subtotal == 548.0
        assert totals.tax_amount == 109.6
        assert totals.total == 657.6

    @pytest.mark.parametrize("unit_cost", [0.01, 0.333, 19.99, 438.4, 1234.567, 99999.99])
    @pytest.mark.parametrize("tax_rate", [0.0, 0.05, 0.15, 0.175, 0.2, 0.25])
    def test_total_minus_tax_is_subtotal(self, aggregator, unit_cost, tax_rate):
        products = [
            RoomProduct(id="p1", name="Pole", unit_cost=unit_cost, quantity=3),
            RoomProduct(id="p2", name="Track", unit_cost=unit_cost / 7),
        ]
        settings = QuoteSettings(tax_rate=tax_rate, markup=MarkupSettings(default_markup_percentage=33.3))

        _, totals = aggregator.aggregate([], products, settings)

        assert round_money(to_decimal(totals.total) - to_decimal(totals.tax_amount)) == totals.subtotal
        assert totals.tax_amount == round_money(to_decimal(totals.subtotal) * to_decimal(tax_rate))

    def test_room_product_marked_up_from_cost(self, aggregator, priced_window, curtain_pole, exclusive_settings):
        line_items, totals = aggregator.aggregate([priced_window], [curtain_pole], exclusive_settings)

        product_line = line_items[1]
        assert product_line.kind == "room_product"
        assert product_line.room_id == "lounge"
        assert product_line.cost_total == 40.0
        assert product_line.total == 50.0
        assert totals.subtotal == 598.0
        assert totals.tax_amount == 119.6
        assert totals.total == 717.6

    def test_room_product_selling_price_is_used(self, aggregator, exclusive_settings):
        product = RoomProduct(id="p2", name="Fitting", unit_cost=40, unit_selling_price=60)

        line_items, _ = aggregator.aggregate([], [product], exclusive_settings)

        assert line_items[0].total == 60.0
        assert line_items[0].markup_percentage == 50.0

    def test_profit_and_margin(self, aggregator, priced_window, exclusive_settings):
        _, totals = aggregator.aggregate([priced_window], [], exclusive_settings)

        assert totals.cost_total == 438.4
        assert totals.selling_total == 548.0
        assert totals.profit_total == 109.6
        assert totals.gross_margin_percent == pytest.approx(20.0)

    def test_category_totals_split_net_selling(self, aggregator, priced_window, exclusive_settings):
        line_items, _ = aggregator.aggregate([priced_window], [], exclusive_settings)

        assert line_items[0].category_totals == {"fabric": 485.5, "manufacturing": 62.5}

    def test_subtotal_is_sum_of_rounded_lines(self, aggregator, exclusive_settings):
        products = [
            RoomProduct(id=f"p{i}", name="Hook", category="hardware", unit_cost=0.333) for i in range(3)
        ]

        line_items, totals = aggregator.aggregate([], products, exclusive_settings)

        # 0.33 x 1.25 = 0.4125 per line
        assert [item.total for item in line_items] == [0.41, 0.41, 0.41]
        assert totals.subtotal == 1.23


class TestTaxInclusive:
    """Stored selling prices include tax."""

    def test_net_extracted_once(self, aggregator, priced_window, inclusive_settings):
        window, result = priced_window
        window = window.model_copy(update={"markup_override": 50})

        line_items, totals = aggregator.aggregate([(window, result)], [], inclusive_settings)

        assert line_items[0].gross_selling_total == 657.6
        assert line_items[0].total == 548.0
        assert totals.subtotal == 548.0
        assert totals.tax_amount == 109.6
        assert totals.total == 657.6

    def test_room_product_selling_price_is_gross(self, aggregator, inclusive_settings):
        product = RoomProduct(id="p3", name="Track", unit_cost=50, unit_selling_price=120)

        line_items, totals = aggregator.aggregate([], [product], inclusive_settings)

        assert line_items[0].total == 100.0
        assert totals.tax_amount == 20.0
        assert totals.total == 120.0


class TestWarnings:
    """Warnings carried onto the totals."""

    def test_unresolved_markup_warning(self, aggregator, priced_window):
        settings = QuoteSettings(tax_rate=0.2, markup=MarkupSettings())

        _, totals = aggregator.aggregate([priced_window], [], settings)

        codes = [w.code for w in totals.warnings]
        assert codes == [ErrorCode.UNRESOLVED_MARKUP.value]
        assert totals.warnings[0].item_id == "w1"

    def test_upstream_warnings_are_kept(self, aggregator, scenario_window, profile, exclusive_settings):
        window = scenario_window.model_copy(update={"fabric": None})
        result = get_treatment_cost_service().calculate(window, profile)

        _, totals = aggregator.aggregate([(window, result)], [], exclusive_settings, result.warnings)

        assert ErrorCode.MISSING_FABRIC_SELECTION.value in [w.code for w in totals.warnings]

    def test_empty_quote(self, aggregator, exclusive_settings):
        line_items, totals = aggregator.aggregate([], [], exclusive_settings)

        assert line_items == ()
        assert totals.subtotal == 0.0
        assert totals.total == 0.0
        assert totals.gross_margin_percent == 0.0


class TestSettingsDefaults:
    """Quote settings fall back to the configured tax rate and currency."""

    def test_configured_defaults(self):
        settings = QuoteSettings()

        assert settings.tax_rate == 0.2
        assert settings.currency == "GBP"

    def test_defaults_follow_configuration(self, aggregator, monkeypatch):
        monkeypatch.setattr(config.settings, "default_tax_rate", 0.1)
        monkeypatch.setattr(config.settings, "default_currency", "EUR")
        product = RoomProduct(id="p1", name="Pole", unit_cost=40)

        _, totals = aggregator.aggregate([], [product], QuoteSettings())

        assert totals.tax_rate == 0.1
        assert totals.currency == "EUR"
        assert totals.tax_amount == 4.0
        assert totals.total == 44.0
