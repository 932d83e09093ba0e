"""Contract tests for pricing API endpoints."""

import pytest
from fastapi.testclient import TestClient


pytestmark = pytest.mark.contract


@pytest.fixture
def window_payload() -> dict:
    """Canonical window: 2.0 m rail, 2.5 m drop, 140 cm fabric at 45/m."""
    return {
        "id": "w1",
        "name": "Lounge - curtains",
        "measurement": {
            "rail_width": 2.0,
            "drop": 2.5,
            "header_allowance": 0.08,
            "bottom_hem": 0.15,
            "seam_hem": 0.015,
            "waste_percent": 5,
            "fullness_ratio": 2.0,
        },
        "fabric": {"id": "fab-linen", "name": "Linen natural", "price_per_metre": 45, "width": 1.4},
        "manufacturing_type": "machine",
    }


class TestPriceTreatmentEndpoint:
    """Contract tests for POST /api/v1/pricing/treatments endpoint."""

    def test_price_treatment(self, client: TestClient, window_payload: dict):
        response = client.post("/api/v1/pricing/treatments", json=window_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        result = data["data"]
        assert result["status"] == "complete"
        assert result["widths_required"] == 3
        assert result["linear_metres"] == 8.631
        assert result["total_cost"] == 438.4
        assert [line["id"] for line in result["breakdown"]] == ["fabric", "manufacturing"]
        assert result["breakdown"][0]["source"] == "selected"

    def test_price_treatment_from_grid(self, client: TestClient, window_payload: dict):
        window_payload["pricing_method"] = "pricing_grid"
        window_payload["fabric"]["pricing_grid"] = {
            "width_columns": [200, 400],
            "drop_rows": [{"drop": 250, "prices": [95, 165]}],
            "unit": "cm",
        }

        response = client.post("/api/v1/pricing/treatments", json=window_payload)

        assert response.status_code == 200
        result = response.json()["data"]
        assert result["fabric_cost"] == 165.0
        assert result["total_cost"] == 215.0

    def test_descending_grid_rejected(self, client: TestClient, window_payload: dict):
        window_payload["fabric"]["pricing_grid"] = {
            "width_columns": [400, 200],
            "drop_rows": [{"drop": 250, "prices": [165, 95]}],
        }

        response = client.post("/api/v1/pricing/treatments", json=window_payload)

        assert response.status_code == 422

    def test_response_structure(self, client: TestClient, window_payload: dict):
        response = client.post("/api/v1/pricing/treatments", json=window_payload)

        data = response.json()
        assert "success" in data
        assert "message" in data
        assert "data" in data
        assert "timestamp" in data

    def test_explicit_profile(self, client: TestClient, window_payload: dict):
        window_payload["manufacturing_type"] = "hand"

        response = client.post("/api/v1/pricing/treatments?profile_id=default", json=window_payload)

        assert response.status_code == 200
        assert response.json()["data"]["manufacturing_cost"] == 90.0

    def test_unknown_profile(self, client: TestClient, window_payload: dict):
        response = client.post("/api/v1/pricing/treatments?profile_id=nope", json=window_payload)

        assert response.status_code == 404
        data = response.json()
        assert data["success"] is False
        assert data["error_code"] == "PROFILE_NOT_FOUND"

    def test_invalid_fabric_width(self, client: TestClient, window_payload: dict):
        window_payload["fabric"]["width"] = 0

        response = client.post("/api/v1/pricing/treatments", json=window_payload)

        assert response.status_code == 422
        data = response.json()
        assert data["success"] is False
        assert data["error_code"] == "INVALID_FABRIC_WIDTH"

    def test_missing_fabric_warning(self, client: TestClient, window_payload: dict):
        del window_payload["fabric"]

        response = client.post("/api/v1/pricing/treatments", json=window_payload)

        assert response.status_code == 200
        result = response.json()["data"]
        assert result["fabric_source"] == "fallback"
        assert result["warnings"][0]["code"] == "MISSING_FABRIC_SELECTION"

    def test_negative_allowance_rejected(self, client: TestClient, window_payload: dict):
        window_payload["measurement"]["bottom_hem"] = -0.1

        response = client.post("/api/v1/pricing/treatments", json=window_payload)

        assert response.status_code == 422


class TestPriceRecordEndpoint:
    """Contract tests for POST /api/v1/pricing/records endpoint."""

    def test_price_legacy_record(self, client: TestClient, sample_legacy_record: dict):
        response = client.post(
            "/api/v1/pricing/records", json={"record": sample_legacy_record, "unit": "cm"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["window"]["measurement"]["rail_width"] == 2.0
        assert data["result"]["total_cost"] == 438.4

    def test_negative_allowance_in_record(self, client: TestClient, sample_legacy_record: dict):
        sample_legacy_record["bottom_hem"] = -5

        response = client.post(
            "/api/v1/pricing/records", json={"record": sample_legacy_record, "unit": "cm"}
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_MEASUREMENT"

    def test_fullness_below_one_in_record(self, client: TestClient, sample_legacy_record: dict):
        sample_legacy_record["fullness"] = 0.5

        response = client.post(
            "/api/v1/pricing/records", json={"record": sample_legacy_record, "unit": "cm"}
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestMarkupEndpoint:
    """Contract tests for POST /api/v1/pricing/markup endpoint."""

    def test_category_markup_with_cost(self, client: TestClient):
        payload = {
            "settings": {"default_markup_percentage": 20, "category_markups": {"curtains": 25}},
            "category": "Curtains",
            "cost": 438.40,
        }

        response = client.post("/api/v1/pricing/markup", json=payload)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["markup"]["percentage"] == 25
        assert data["markup"]["source"] == "category"
        assert data["selling_price"] == 548.0
        assert data["unresolved"] is False

    def test_unresolved_markup(self, client: TestClient):
        response = client.post("/api/v1/pricing/markup", json={"category": "wallpaper"})

        data = response.json()["data"]
        assert data["markup"]["source"] == "default"
        assert data["unresolved"] is True
