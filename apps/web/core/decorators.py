"""
Decorators and helpers for JSON request handling.
"""

import json
from collections.abc import Callable
from functools import wraps
from typing import Any

from django.core.cache import cache
from django.core.exceptions import PermissionDenied
from django.http import HttpRequest, JsonResponse

IDEMPOTENCY_TIMEOUT = 86400  # 24 hours


def json_response(data: dict[str, Any], status: int = 200) -> JsonResponse:
    """JSON response with CORS headers for the storefront frontend."""
    response = JsonResponse(data, status=status)
    response["Access-Control-Allow-Origin"] = "*"
    response["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    response["Access-Control-Allow-Headers"] = "Content-Type, Idempotency-Key"
    return response


def idempotency_key_required(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator that requires an Idempotency-Key header for POST requests.

    Keys are scoped to the request path. If the same key is reused on the
    same path, the cached response from the first request is returned.

    Usage:
        @idempotency_key_required
        def create_order(request):
            ...
    """

    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        key = request.headers.get("Idempotency-Key")

        if not key:
            return json_response(
                {"error": "Idempotency-Key header is required"},
                status=400,
            )

        cache_key = f"idempotency:{request.path}:{key}"
        cached = cache.get(cache_key)

        if cached:
            return json_response(cached["data"], status=cached["status"])

        response = view_func(request, *args, **kwargs)

        # Only successful responses are replayed
        if response.status_code < 400:
            cache.set(
                cache_key,
                {
                    "data": json.loads(response.content),
                    "status": response.status_code,
                },
                timeout=IDEMPOTENCY_TIMEOUT,
            )

        return response

    return wrapper


def staff_required(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator for back-office endpoints.

    Anonymous users get a 401 JSON body; authenticated non-staff users are
    denied with PermissionDenied (403).
    """

    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> Any:
        user = request.user
        if not user.is_authenticated:
            return json_response({"error": "Authentication required"}, status=401)
        if not user.is_staff:
            raise PermissionDenied("Staff access required")
        return view_func(request, *args, **kwargs)

    return wrapper
