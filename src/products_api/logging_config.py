"""
Request-scoped structured logging for the products Lambda functions.

Every invocation binds a RequestContext (Lambda request id, HTTP method,
route and path parameters taken from the API Gateway event). Each log line
written while handling that request carries those fields, so a single
product's history can be pulled out of CloudWatch Logs Insights by
productID or request id.
"""

import functools
import json
import logging
import os
import sys
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


@dataclass(frozen=True)
class RequestContext:
    """What is known about the request currently being handled."""
    request_id: str
    http_method: Optional[str] = None
    route: Optional[str] = None
    path_parameters: dict = field(default_factory=dict)


_request_var: ContextVar[Optional[RequestContext]] = ContextVar("request_context", default=None)


def bind_request(event: Optional[dict], context: Any = None) -> RequestContext:
    """
    Bind the current invocation's request details for logging.

    The Lambda request id doubles as the correlation id; a UUID4 is used
    when running outside Lambda. Both REST (v1) and HTTP API (v2) event
    shapes are understood.
    """
    event = event or {}
    http = (event.get("requestContext") or {}).get("http") or {}

    request = RequestContext(
        request_id=getattr(context, "aws_request_id", None) or str(uuid.uuid4()),
        http_method=event.get("httpMethod") or http.get("method"),
        route=event.get("resource") or event.get("routeKey") or http.get("path"),
        path_parameters=dict(event.get("pathParameters") or {}),
    )
    _request_var.set(request)
    return request


def current_request() -> Optional[RequestContext]:
    """Return the bound request, if any."""
    return _request_var.get()


def get_correlation_id() -> Optional[str]:
    """Return the bound request id, or None outside a request."""
    request = _request_var.get()
    return request.request_id if request else None


class StructuredJsonFormatter(logging.Formatter):
    """Renders each record as one JSON object carrying the bound request."""

    def __init__(self, service_name: str = "products-api"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        request = _request_var.get()
        if request is not None:
            log_data["correlation_id"] = request.request_id
            log_data["http_method"] = request.http_method
            log_data["route"] = request.route
            if request.path_parameters:
                log_data["path_parameters"] = request.path_parameters

        for name in ("product_id", "status_code", "duration_ms"):
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if isinstance(getattr(record, "error", None), dict):
            log_data["error"] = record.error

        if record.exc_info and record.exc_info[0]:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(log_data, default=str)


class ServiceLogger(logging.LoggerAdapter):
    """Logger adapter that merges its bound fields into every record."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs

    def for_product(self, product_id: Optional[str]) -> "ServiceLogger":
        """Return a logger whose records name the given product."""
        return ServiceLogger(self.logger, {**self.extra, "product_id": product_id})


def configure_logging(
    level: str = "INFO",
    service_name: str = "products-api",
) -> ServiceLogger:
    """
    Configure logging for the Lambda runtime.

    JSON lines when running inside Lambda, a readable one-line format
    everywhere else.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)

    stream = logging.StreamHandler(sys.stdout)
    stream.setLevel(log_level)
    if os.environ.get("AWS_LAMBDA_FUNCTION_NAME"):
        stream.setFormatter(StructuredJsonFormatter(service_name))
    else:
        stream.setFormatter(
            logging.Formatter("[%(levelname)s] %(asctime)s - %(name)s - %(message)s")
        )
    root_logger.addHandler(stream)

    for noisy in ("boto3", "botocore", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return ServiceLogger(logging.getLogger(service_name), {})


def log_invocation(logger: logging.LoggerAdapter):
    """
    Decorator logging each handler call with its status code and duration.

    Example:
        @log_invocation(logger)
        def get_product(event, context):
            ...
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                response = func(*args, **kwargs)
            except Exception as e:
                duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
                logger.error(
                    f"{func.__name__} raised {type(e).__name__}",
                    extra={"duration_ms": duration_ms},
                    exc_info=True,
                )
                raise

            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            status_code = response.get("statusCode") if isinstance(response, dict) else None
            logger.info(
                f"{func.__name__} answered {status_code}",
                extra={"status_code": status_code, "duration_ms": duration_ms},
            )
            return response
        return wrapper
    return decorator
