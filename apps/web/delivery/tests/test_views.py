"""Tests for store and delivery API views."""

import json
from unittest.mock import patch

from django.test import Client

import pytest

from apps.web.delivery.exceptions import GeocodingError
from apps.web.delivery.geocoding import MockGeocoder
from apps.web.delivery.tests.factories import StoreFactory


def _post(client: Client, url: str, data: dict):
    return client.post(url, data=json.dumps(data), content_type="application/json")


@pytest.mark.django_db
class TestStoreList:
    """Tests for GET /api/stores."""

    def test_lists_active_stores(self, client: Client) -> None:
        store = StoreFactory(name="Amersfoort Centrum")
        StoreFactory(is_active=False)

        response = client.get("/api/stores")

        assert response.status_code == 200
        data = response.json()
        assert len(data["stores"]) == 1
        assert data["stores"][0]["id"] == store.pk
        assert data["stores"][0]["name"] == "Amersfoort Centrum"
        assert data["stores"][0]["coverage_cities"] == ["amersfoort", "leusden"]
        assert response["Access-Control-Allow-Origin"] == "*"

    def test_post_not_allowed(self, client: Client) -> None:
        assert client.post("/api/stores").status_code == 405


@pytest.mark.django_db
class TestNearestStore:
    """Tests for POST /api/stores/nearest."""

    def test_nearest_store_with_distance(self, client: Client) -> None:
        store = StoreFactory()

        response = _post(client, "/api/stores/nearest", {"lat": 52.1365, "lng": 5.4281})

        assert response.status_code == 200
        data = response.json()
        assert data["store"]["id"] == store.pk
        assert data["store"]["distance_km"] == pytest.approx(3.5, abs=0.2)
        assert data["store"]["distance_display"].endswith("km")

    def test_no_active_store(self, client: Client) -> None:
        response = _post(client, "/api/stores/nearest", {"lat": 52.1365, "lng": 5.4281})

        assert response.status_code == 200
        assert response.json() == {"store": None}

    def test_invalid_coordinate(self, client: Client) -> None:
        response = _post(client, "/api/stores/nearest", {"lat": 95, "lng": 5.4})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_coordinate"

    def test_missing_coordinate(self, client: Client) -> None:
        response = _post(client, "/api/stores/nearest", {})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_coordinate"

    def test_invalid_json(self, client: Client) -> None:
        response = client.post(
            "/api/stores/nearest", data="not json", content_type="application/json"
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid JSON in request body"


@pytest.mark.django_db
class TestStoresInRange:
    """Tests for POST /api/stores/in-range."""

    def test_filters_by_max_distance(self, client: Client) -> None:
        near = StoreFactory()
        StoreFactory(latitude=52.3759, longitude=4.8975)

        response = _post(
            client,
            "/api/stores/in-range",
            {"lat": 52.1365, "lng": 5.4281, "max_distance": 10},
        )

        assert response.status_code == 200
        assert [s["id"] for s in response.json()["stores"]] == [near.pk]

    def test_rejects_non_positive_max_distance(self, client: Client) -> None:
        response = _post(
            client,
            "/api/stores/in-range",
            {"lat": 52.1365, "lng": 5.4281, "max_distance": 0},
        )

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "validation_error"
        assert data["details"][0]["field"] == "max_distance"


@pytest.mark.django_db
class TestValidateDelivery:
    """Tests for POST /api/stores/validate-delivery."""

    def test_deliverable(self, client: Client) -> None:
        store = StoreFactory()

        response = _post(
            client,
            "/api/stores/validate-delivery",
            {"lat": 52.1365, "lng": 5.4281, "address": "Hamersveldseweg 10, Leusden"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is True
        assert data["eligibility_class"] == "in_coverage_and_range"
        assert data["nearest_store"]["id"] == store.pk
        assert data["delivery"]["fee"] == "2.50"
        assert data["delivery"]["band"] == "excellent"
        assert data["store_open"] is True

    def test_deliverable_while_closed(self, client: Client) -> None:
        StoreFactory(name="Amersfoort", operating_hours={"monday": {"is_open": False}})

        response = _post(
            client,
            "/api/stores/validate-delivery",
            {"lat": 52.1365, "lng": 5.4281, "address": "Hamersveldseweg 10, Leusden"},
        )

        data = response.json()
        assert data["is_valid"] is True
        assert data["store_open"] is False
        assert data["message"] == "Delivery available, but Amersfoort is currently closed"

    def test_outside_range(self, client: Client) -> None:
        StoreFactory(name="Amersfoort")

        response = _post(
            client,
            "/api/stores/validate-delivery",
            {"lat": 52.3759, "lng": 4.8975, "address": "Damrak 1, Amsterdam"},
        )

        data = response.json()
        assert data["is_valid"] is False
        assert data["eligibility_class"] == "outside_range"
        assert data["message"].startswith("Outside delivery range")
        assert "maximum 15km" in data["message"]
        assert data["delivery"] is None

    def test_no_store(self, client: Client) -> None:
        response = _post(
            client,
            "/api/stores/validate-delivery",
            {"lat": 52.1365, "lng": 5.4281, "address": "Leusden"},
        )

        data = response.json()
        assert data["is_valid"] is False
        assert data["message"] == "No store is currently delivering"


@pytest.mark.django_db
class TestAddressSuggestions:
    """Tests for GET /api/addresses/suggest."""

    def test_short_query_returns_nothing(self, client: Client) -> None:
        with patch("apps.web.delivery.views.suggest_addresses") as mock_suggest:
            response = client.get("/api/addresses/suggest", {"q": "am"})

        assert response.status_code == 200
        assert response.json() == {"suggestions": []}
        mock_suggest.assert_not_called()

    def test_ranked_suggestions(self, client: Client, settings) -> None:
        settings.GEOCODER = "mock"
        StoreFactory()

        response = client.get("/api/addresses/suggest", {"q": "Amersfoort"})

        assert response.status_code == 200
        suggestions = response.json()["suggestions"]
        assert [s["address"].split(",")[0] for s in suggestions] == [
            "Langestraat 50",
            "Stationsplein 1",
        ]
        assert suggestions[0]["distance_display"] == "0m"
        assert suggestions[0]["eligibility_class"] == "in_coverage_and_range"

    def test_geocoding_failure(self, client: Client) -> None:
        with patch(
            "apps.web.delivery.views.suggest_addresses",
            side_effect=GeocodingError("Nominatim request failed: 503", "nominatim", 503),
        ):
            response = client.get("/api/addresses/suggest", {"q": "Amersfoort"})

        assert response.status_code == 502
        assert response.json() == {
            "error": "geocoding_failed",
            "message": "Nominatim request failed: 503",
            "provider": "nominatim",
            "status_code": 503,
        }


@pytest.mark.django_db
class TestAddressAtLocation:
    """Tests for GET /api/addresses/reverse."""

    def test_returns_annotated_address(self, client: Client) -> None:
        StoreFactory()

        with patch(
            "apps.web.delivery.services.default_geocoder",
            return_value=MockGeocoder(),
        ):
            response = client.get("/api/addresses/reverse", {"lat": "52.1534", "lng": "5.3737"})

        assert response.status_code == 200
        assert response.json()["address"].startswith("Stationsplein 1")

    def test_invalid_coordinate(self, client: Client) -> None:
        response = client.get("/api/addresses/reverse", {"lat": "abc", "lng": "5"})

        assert response.status_code == 400

    def test_nothing_found(self, client: Client) -> None:
        with patch(
            "apps.web.delivery.services.default_geocoder",
            return_value=MockGeocoder(places=[]),
        ):
            response = client.get("/api/addresses/reverse", {"lat": "52.15", "lng": "5.38"})

        assert response.status_code == 404
