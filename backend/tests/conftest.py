"""Pytest configuration and fixtures."""

import pytest
from pathlib import Path
import tempfile
import shutil
from fastapi.testclient import TestClient

from pricing_engine.main import app
from pricing_engine.models import (
    FabricItem,
    MarkupSettings,
    Measurement,
    PricingProfile,
    QuoteSettings,
    WindowTreatmentInput,
)
from pricing_engine.services.profile_loader import get_profile_loader
from pricing_engine.services.service_factory import clear_all_service_caches

# API version prefix
API_PREFIX = "/api/v1"


@pytest.fixture(autouse=True)
def reset_service_caches():
    """Start every test with fresh service singletons and an empty profile cache."""
    clear_all_service_caches()
    get_profile_loader().clear_cache()
    yield
    clear_all_service_caches()


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def client():
    """Create FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def profile() -> PricingProfile:
    """Built-in profile: machine made 50 flat, hand made 90 flat, 1.37 m fallback fabric."""
    return PricingProfile()


@pytest.fixture
def scenario_measurement() -> Measurement:
    """200 cm rail, 250 cm drop, 8 cm header, 15 cm hem, 1.5 cm seams, 5% waste, fullness 2."""
    return Measurement(
        rail_width=2.0,
        drop=2.5,
        header_allowance=0.08,
        bottom_hem=0.15,
        seam_hem=0.015,
        waste_percent=5,
        fullness_ratio=2.0,
    )


@pytest.fixture
def scenario_fabric() -> FabricItem:
    """140 cm plain fabric at 45 per metre."""
    return FabricItem(id="fab-linen", name="Linen natural", price_per_metre=45.0, width=1.4)


@pytest.fixture
def scenario_window(scenario_measurement: Measurement, scenario_fabric: FabricItem) -> WindowTreatmentInput:
    """Machine-made pair of curtains; costs 438.40 with the built-in profile."""
    return WindowTreatmentInput(
        id="w1",
        name="Lounge - curtains",
        measurement=scenario_measurement,
        fabric=scenario_fabric,
    )


@pytest.fixture
def markup_settings() -> MarkupSettings:
    """25% global markup, no category rules."""
    return MarkupSettings(default_markup_percentage=25.0)


@pytest.fixture
def exclusive_settings(markup_settings: MarkupSettings) -> QuoteSettings:
    """20% tax added on top of selling prices."""
    return QuoteSettings(tax_rate=0.20, tax_inclusive=False, markup=markup_settings)


@pytest.fixture
def inclusive_settings(markup_settings: MarkupSettings) -> QuoteSettings:
    """Selling prices already include 20% tax."""
    return QuoteSettings(tax_rate=0.20, tax_inclusive=True, markup=markup_settings)


@pytest.fixture
def sample_legacy_record() -> dict:
    """Stored window record using legacy keys, lengths in centimetres."""
    return {
        "id": "legacy-1",
        "name": "Bedroom - curtains",
        "measurement_a": 200,
        "measurement_b": 250,
        "header_hem": 8,
        "bottom_hem": 15,
        "seam_hems": 1.5,
        "waste_percent": 5,
        "fullness": 2,
        "fabric": {"id": "fab-linen", "name": "Linen natural", "price_per_meter": 45, "fabric_width_cm": 140},
        "manufacturing_type": "machine",
    }
