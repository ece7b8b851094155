"""Tests for geocoding adapters - Nominatim mocked with respx, plus the mock."""

import httpx
import pytest
import respx
from storefront_schemas import Coordinate

from apps.web.delivery.exceptions import GeocodingError
from apps.web.delivery.geocoding import (
    Geocoder,
    MockGeocoder,
    NominatimGeocoder,
    get_geocoder,
)

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def geocoder() -> NominatimGeocoder:
    """Create a Nominatim geocoder."""
    return NominatimGeocoder(user_agent="StorefrontTests/1.0", country_codes="nl")


@pytest.fixture
def search_response() -> list[dict]:
    """Sample Nominatim search response."""
    return [
        {
            "place_id": 1,
            "display_name": "Langestraat 50, 3811 AH Amersfoort, Nederland",
            "lat": "52.1561",
            "lon": "5.3874",
        },
        {
            "place_id": 2,
            "display_name": "Langestraat, Leusden, Nederland",
            "lat": "52.1330",
            "lon": "5.4310",
        },
    ]


# =============================================================================
# Factory Tests
# =============================================================================


class TestGetGeocoder:
    """Tests for the get_geocoder factory."""

    def test_mock(self) -> None:
        geocoder = get_geocoder("mock")
        assert isinstance(geocoder, MockGeocoder)
        assert isinstance(geocoder, Geocoder)

    def test_nominatim_with_kwargs(self) -> None:
        geocoder = get_geocoder("nominatim", user_agent="Agent/2.0")
        assert isinstance(geocoder, NominatimGeocoder)
        assert geocoder.user_agent == "Agent/2.0"

    def test_unsupported(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            get_geocoder("google")

        assert "Unsupported geocoder: google" in str(exc_info.value)


# =============================================================================
# Nominatim Tests
# =============================================================================


class TestNominatimSearch:
    """Tests for NominatimGeocoder.search."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_success(self, geocoder, search_response):
        """Test that places are parsed into geocoded addresses."""
        route = respx.get(NominatimGeocoder.SEARCH_URL).mock(
            return_value=httpx.Response(200, json=search_response)
        )

        results = await geocoder.search("Langestraat", limit=5)
        await geocoder.close()

        assert [r.text for r in results] == [
            "Langestraat 50, 3811 AH Amersfoort, Nederland",
            "Langestraat, Leusden, Nederland",
        ]
        assert results[0].coordinate == Coordinate(latitude=52.1561, longitude=5.3874)

        request = route.calls.last.request
        assert request.url.params["q"] == "Langestraat"
        assert request.url.params["countrycodes"] == "nl"
        assert request.url.params["limit"] == "5"
        assert request.headers["User-Agent"] == "StorefrontTests/1.0"

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_skips_unusable_places(self, geocoder, search_response):
        """Test that entries without coordinates or out of range are dropped."""
        search_response.append({"display_name": "No coordinates"})
        search_response.append({"display_name": "Bad", "lat": "200", "lon": "5"})
        respx.get(NominatimGeocoder.SEARCH_URL).mock(
            return_value=httpx.Response(200, json=search_response)
        )

        results = await geocoder.search("Langestraat")

        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_blank_query_skips_request(self, geocoder):
        """Test that a blank query returns nothing without calling the API."""
        assert await geocoder.search("   ") == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_http_error(self, geocoder):
        """Test that HTTP errors become GeocodingError."""
        respx.get(NominatimGeocoder.SEARCH_URL).mock(
            return_value=httpx.Response(503, text="Service Unavailable")
        )

        with pytest.raises(GeocodingError) as exc_info:
            await geocoder.search("Amersfoort")

        assert exc_info.value.provider == "nominatim"
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_network_error(self, geocoder):
        """Test that connection failures become GeocodingError."""
        respx.get(NominatimGeocoder.SEARCH_URL).mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        with pytest.raises(GeocodingError) as exc_info:
            await geocoder.search("Amersfoort")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_invalid_json(self, geocoder):
        respx.get(NominatimGeocoder.SEARCH_URL).mock(
            return_value=httpx.Response(200, text="<html>not json</html>")
        )

        with pytest.raises(GeocodingError) as exc_info:
            await geocoder.search("Amersfoort")

        assert "invalid JSON" in exc_info.value.message


class TestNominatimReverse:
    """Tests for NominatimGeocoder.reverse."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_reverse_success(self, geocoder):
        route = respx.get(NominatimGeocoder.REVERSE_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "display_name": "Stationsplein 1, 3818 LE Amersfoort, Nederland",
                    "lat": "52.1533",
                    "lon": "5.3736",
                },
            )
        )

        result = await geocoder.reverse(Coordinate(latitude=52.1533, longitude=5.3736))

        assert result is not None
        assert result.text.startswith("Stationsplein 1")
        assert route.calls.last.request.url.params["lat"] == "52.1533"

    @pytest.mark.asyncio
    @respx.mock
    async def test_reverse_nothing_found(self, geocoder):
        """Test that Nominatim's error body maps to None."""
        respx.get(NominatimGeocoder.REVERSE_URL).mock(
            return_value=httpx.Response(200, json={"error": "Unable to geocode"})
        )

        result = await geocoder.reverse(Coordinate(latitude=0, longitude=0))

        assert result is None


# =============================================================================
# Mock Geocoder Tests
# =============================================================================


class TestMockGeocoder:
    """Tests for MockGeocoder."""

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self):
        geocoder = MockGeocoder()

        results = await geocoder.search("amersFOORT")

        assert len(results) == 2
        assert geocoder.queries == ["amersFOORT"]

    @pytest.mark.asyncio
    async def test_search_no_match(self):
        assert await MockGeocoder().search("Rotterdam") == []

    @pytest.mark.asyncio
    async def test_reverse_returns_closest(self):
        result = await MockGeocoder().reverse(Coordinate(latitude=52.37, longitude=4.90))

        assert result is not None
        assert result.text.startswith("Damrak 1")
