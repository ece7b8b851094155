"""
Store and delivery API views - public endpoints for the location picker.

These endpoints are used by the storefront frontend:
- Store directory listing
- Nearest store / stores in range for a coordinate
- Authoritative delivery validation (same resolver as the client)
- Address suggestions while the customer types
"""

import logging

from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from django.views.decorators.cache import cache_control
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from apps.web.core.decorators import json_response
from apps.web.core.serializers import parse_body
from apps.web.delivery.eligibility import nearest_store, resolve, stores_in_range
from apps.web.delivery.exceptions import GeocodingError, InvalidCoordinate
from apps.web.delivery.geo import make_coordinate
from apps.web.delivery.serializers import (
    AddressCandidateSchema,
    AddressSuggestionsResponse,
    LocationRequest,
    NearestStoreResponse,
    StoreListResponse,
    StoreSchema,
    StoresInRangeRequest,
    StoresInRangeResponse,
    ValidateDeliveryRequest,
    ValidateDeliveryResponse,
    nearby_store,
)
from apps.web.delivery.services import get_active_stores, locate_address, suggest_addresses

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3


@require_GET
@cache_control(max_age=60, public=True)
def store_list(_request: HttpRequest) -> JsonResponse:
    """
    GET /api/stores

    Active stores shown on the website.
    """
    stores = [StoreSchema.from_config(store) for store in get_active_stores()]
    return json_response(StoreListResponse(stores=stores).model_dump(mode="json"))


@csrf_exempt
@require_POST
def nearest(request: HttpRequest) -> JsonResponse:
    """
    POST /api/stores/nearest

    Request body: {"lat": float, "lng": float}
    Response: NearestStoreResponse (store is null when no store is active)
    """
    body = parse_body(request, LocationRequest)
    if isinstance(body, JsonResponse):
        return body

    try:
        coordinate = make_coordinate(body.lat, body.lng)
    except InvalidCoordinate as e:
        return json_response(e.to_dict(), status=400)

    found = nearest_store(coordinate, get_active_stores())
    response = NearestStoreResponse(
        store=nearby_store(found.store, found.distance_km) if found else None
    )
    return json_response(response.model_dump(mode="json"))


@csrf_exempt
@require_POST
def in_range(request: HttpRequest) -> JsonResponse:
    """
    POST /api/stores/in-range

    Request body: {"lat": float, "lng": float, "max_distance": float}
    Response: StoresInRangeResponse, nearest first
    """
    body = parse_body(request, StoresInRangeRequest)
    if isinstance(body, JsonResponse):
        return body

    try:
        coordinate = make_coordinate(body.lat, body.lng)
    except InvalidCoordinate as e:
        return json_response(e.to_dict(), status=400)

    found = stores_in_range(coordinate, get_active_stores(), body.max_distance)
    response = StoresInRangeResponse(
        stores=[nearby_store(entry.store, entry.distance_km) for entry in found]
    )
    return json_response(response.model_dump(mode="json"))


@csrf_exempt
@require_POST
def validate_delivery(request: HttpRequest) -> JsonResponse:
    """
    POST /api/stores/validate-delivery

    Authoritative eligibility check for a delivery address.

    Request body: {"lat": float, "lng": float, "address": str}
    Response: ValidateDeliveryResponse (is_valid=false when undeliverable)
    """
    body = parse_body(request, ValidateDeliveryRequest)
    if isinstance(body, JsonResponse):
        return body

    try:
        coordinate = make_coordinate(body.lat, body.lng)
    except InvalidCoordinate as e:
        return json_response(e.to_dict(), status=400)

    result = resolve(coordinate, get_active_stores(), body.address)
    response = ValidateDeliveryResponse.from_result(result, timezone.localtime())
    return json_response(response.model_dump(mode="json"))


@require_GET
def address_suggestions(request: HttpRequest) -> JsonResponse:
    """
    GET /api/addresses/suggest?q=<text>

    Geocoded suggestions ranked by eligibility, then distance.
    """
    query = request.GET.get("q", "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        return json_response(AddressSuggestionsResponse(suggestions=[]).model_dump())

    try:
        candidates = suggest_addresses(query)
    except GeocodingError as e:
        logger.warning("Address suggestion failed for %r: %s", query, e.message)
        return json_response(e.to_dict(), status=502)

    response = AddressSuggestionsResponse(
        suggestions=[AddressCandidateSchema.from_candidate(c) for c in candidates]
    )
    return json_response(response.model_dump(mode="json"))


@require_GET
def address_at_location(request: HttpRequest) -> JsonResponse:
    """
    GET /api/addresses/reverse?lat=<lat>&lng=<lng>

    Address at the customer's device location, annotated with eligibility.
    """
    try:
        coordinate = make_coordinate(request.GET.get("lat"), request.GET.get("lng"))
    except InvalidCoordinate as e:
        return json_response(e.to_dict(), status=400)

    try:
        candidate = locate_address(coordinate)
    except GeocodingError as e:
        logger.warning("Reverse geocoding failed: %s", e.message)
        return json_response(e.to_dict(), status=502)

    if candidate is None:
        return json_response({"error": "No address found at this location"}, status=404)

    return json_response(
        AddressCandidateSchema.from_candidate(candidate).model_dump(mode="json")
    )
