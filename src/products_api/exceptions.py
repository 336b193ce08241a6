"""
Custom exceptions for the products API.
Every error a handler knows how to answer carries an ErrorKind, which is
what the response classifier matches on.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from products_api.logging_config import get_correlation_id


class ErrorKind(Enum):
    """Closed set of error kinds produced by the request pipeline."""
    VALIDATION = "validation"
    SYNTAX = "syntax"
    HTTP = "http"
    CONFIGURATION = "configuration"


@dataclass
class ErrorContext:
    """Where and when an error was raised, for the rejection log line."""
    correlation_id: Optional[str] = field(default_factory=get_correlation_id)
    product_id: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    additional_data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert context to dictionary for logging."""
        return {
            "correlation_id": self.correlation_id,
            "product_id": self.product_id,
            "timestamp": self.timestamp,
            **self.additional_data,
        }


class ProductsApiError(Exception):
    """Base exception for all products API errors."""

    kind: ErrorKind = ErrorKind.HTTP

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.original_exception = original_exception

    def to_dict(self) -> dict:
        """Serialize exception for logging."""
        return {
            "error_type": self.__class__.__name__,
            "kind": self.kind.value,
            "message": self.message,
            "context": self.context.to_dict(),
            "original_exception": str(self.original_exception) if self.original_exception else None,
        }


class ValidationError(ProductsApiError):
    """Raised when a product payload fails schema validation."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        errors: list[str],
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(
            message=f"{len(errors)} validation error(s) occurred",
            context=context,
        )
        self.errors = errors

    def to_dict(self) -> dict:
        return {**super().to_dict(), "errors": self.errors}


class RequestBodySyntaxError(ProductsApiError):
    """Raised when the request body cannot be parsed as JSON."""

    kind = ErrorKind.SYNTAX

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            context=context,
            original_exception=original_exception,
        )


class HttpError(ProductsApiError):
    """Domain error that already knows its HTTP status code and body."""

    kind = ErrorKind.HTTP

    def __init__(
        self,
        status_code: int,
        body: Optional[dict[str, Any]] = None,
        context: Optional[ErrorContext] = None,
    ):
        self.status_code = status_code
        self.body = body if body is not None else {}
        super().__init__(
            message=f"HTTP {status_code}: {self.body}",
            context=context,
        )


class NotFoundError(HttpError):
    """Raised when the referenced product does not exist."""

    def __init__(
        self,
        product_id: Optional[str],
        context: Optional[ErrorContext] = None,
    ):
        ctx = context or ErrorContext()
        ctx.product_id = product_id

        super().__init__(
            status_code=404,
            body={"error": "not found"},
            context=ctx,
        )
        self.product_id = product_id


class ConfigurationError(ProductsApiError):
    """Raised when configuration is invalid or missing."""

    kind = ErrorKind.CONFIGURATION

    def __init__(
        self,
        message: str,
        config_key: str,
        context: Optional[ErrorContext] = None,
    ):
        ctx = context or ErrorContext()
        ctx.additional_data["config_key"] = config_key

        super().__init__(
            message=message,
            context=ctx,
        )
        self.config_key = config_key
