"""
Shared request parsing and error schemas for the JSON API.
"""

import json
from typing import Literal, TypeVar

from django.http import HttpRequest, JsonResponse

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from apps.web.core.decorators import json_response

_T = TypeVar("_T", bound=BaseModel)


class ValidationErrorDetail(BaseModel):
    """A single validation error."""

    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    """Response for validation errors."""

    error: Literal["validation_error"]
    details: list[ValidationErrorDetail]


def parse_body(request: HttpRequest, schema: type[_T]) -> _T | JsonResponse:
    """Parse a JSON request body into a schema, or return a 400 response."""
    try:
        body = json.loads(request.body or b"{}")
        return schema.model_validate(body)
    except json.JSONDecodeError:
        return json_response(
            {"error": "Invalid JSON in request body"},
            status=400,
        )
    except PydanticValidationError as e:
        errors = [
            ValidationErrorDetail(
                field=".".join(str(loc) for loc in err["loc"]),
                message=err["msg"],
            )
            for err in e.errors()
        ]
        response = ValidationErrorResponse(error="validation_error", details=errors)
        return json_response(response.model_dump(), status=400)
