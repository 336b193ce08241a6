"""
API Gateway response building and error classification.
"""

import json
import logging
from decimal import Decimal
from typing import Any

from products_api.exceptions import (
    ErrorKind,
    HttpError,
    ProductsApiError,
    RequestBodySyntaxError,
    ValidationError,
)

logger = logging.getLogger(__name__)

HEADERS = {"content-type": "application/json"}


def _json_default(o):
    if isinstance(o, Decimal):
        if o % 1 == 0:
            return int(o)
        return float(o)
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


def build_response(status_code: int, payload: Any = None) -> dict:
    """
    Build an API Gateway proxy response.

    A None payload produces an empty body (used by 204 responses).
    """
    body = "" if payload is None else json.dumps(payload, default=_json_default)
    return {
        "statusCode": status_code,
        "headers": dict(HEADERS),
        "body": body,
    }


def error_response(error: Exception) -> dict:
    """
    Map a raised error to an API Gateway response.

    Validation errors win over syntax errors, which win over HTTP errors.
    Anything unrecognized is re-raised so the platform reports it.
    """
    kind = error.kind if isinstance(error, ProductsApiError) else None

    if kind is ErrorKind.VALIDATION and isinstance(error, ValidationError):
        return build_response(400, {"errors": error.errors})

    if kind is ErrorKind.SYNTAX and isinstance(error, RequestBodySyntaxError):
        return build_response(
            400, {"error": f"invalid request body format: {error.message}"}
        )

    if kind is ErrorKind.HTTP and isinstance(error, HttpError):
        return build_response(error.status_code, error.body)

    raise error
