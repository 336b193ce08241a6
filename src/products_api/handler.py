"""
AWS Lambda handlers for the products CRUD API.
Invoked by API Gateway (HTTP API) after the Cognito authorizer has accepted
the caller's token.

Each handler is a single request/response cycle: read path parameters,
optionally parse and validate the body, make at most two sequential
DynamoDB calls, and answer. Known error kinds are turned into 4xx
responses; anything else is logged and re-raised for Lambda to report.
"""

import base64
import binascii
import functools
import json
import os
import uuid
from typing import Any, Callable, Optional

from products_api.config import get_settings
from products_api.exceptions import HttpError, RequestBodySyntaxError
from products_api.logging_config import (
    bind_request,
    configure_logging,
    log_invocation,
)
from products_api.models import Product
from products_api.repository import (
    AWSClientFactory,
    DynamoProductRepository,
    ProductRepository,
)
from products_api.responses import build_response, error_response
from products_api.validator import ProductValidator

logger = configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    service_name=os.environ.get("SERVICE_NAME", "products-api"),
)

_repository: Optional[ProductRepository] = None


def get_repository() -> ProductRepository:
    """Return the process-wide repository, creating it on first use."""
    global _repository
    if _repository is None:
        _repository = DynamoProductRepository(AWSClientFactory.get_products_table())
    return _repository


def set_repository(repository: Optional[ProductRepository]) -> None:
    """Replace the process-wide repository (None forces lazy re-creation)."""
    global _repository
    _repository = repository


def api_handler(func: Callable[[dict, Any], dict]) -> Callable[[dict, Any], dict]:
    """
    Wrap a handler with request binding and error classification.

    Recognized errors become responses; unrecognized ones propagate.
    """

    @functools.wraps(func)
    def wrapper(event: dict, context: Any = None) -> dict:
        event = event or {}
        bind_request(event, context)

        try:
            return func(event, context)
        except Exception as e:
            response = error_response(e)
            logger.warning(
                f"{func.__name__} rejected request",
                extra={
                    "status_code": response["statusCode"],
                    "error": e.to_dict(),
                },
            )
            return response

    return wrapper


def path_parameter(event: dict, name: str) -> str:
    """
    Read a required path parameter.

    Raises:
        HttpError: 400 when the parameter is absent or empty
    """
    value = (event.get("pathParameters") or {}).get(name)
    if not value:
        raise HttpError(400, {"error": f"missing path parameter: {name}"})
    return value


def parse_body(event: dict) -> Any:
    """
    Decode the JSON request body.

    Raises:
        RequestBodySyntaxError: If the body is empty, badly encoded or not JSON
    """
    body = event.get("body")
    if body is None or body == "":
        raise RequestBodySyntaxError("request body is empty")

    if event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise RequestBodySyntaxError(
                f"body is not valid base64-encoded UTF-8: {e}",
                original_exception=e,
            )

    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise RequestBodySyntaxError(str(e), original_exception=e)


@log_invocation(logger)
@api_handler
def get_product(event: dict, context: Any = None) -> dict:
    """GET /product/{productID}"""
    product_id = path_parameter(event, "productID")
    product = get_repository().get_by_id(product_id)

    return build_response(200, product.to_response())


@log_invocation(logger)
@api_handler
def create_product(event: dict, context: Any = None) -> dict:
    """
    POST /product

    The client's category is replaced by the configured default category
    and a fresh productID is assigned.
    """
    payload = ProductValidator().validate(parse_body(event))

    product = Product.from_input(
        payload,
        product_id=str(uuid.uuid4()),
        category=get_settings().default_category,
    )
    get_repository().put(product)

    logger.for_product(product.product_id).info("Product created")

    return build_response(
        201,
        {
            "message": "New Product Added!",
            "product": product.to_response(),
        },
    )


@log_invocation(logger)
@api_handler
def update_product(event: dict, context: Any = None) -> dict:
    """
    PUT /product/{id}

    Replaces the whole product. The existence check and the write are two
    separate calls with no condition between them.
    """
    product_id = path_parameter(event, "id")
    repository = get_repository()
    product_logger = logger.for_product(product_id)

    existing = repository.get_by_id(product_id)

    payload = ProductValidator().validate(parse_body(event))
    product = Product.from_input(payload, product_id=product_id)

    if product.category != existing.category:
        # Category is part of the key, so this writes a second item.
        product_logger.warning(
            f"Category changed from {existing.category!r} to {product.category!r}",
        )

    repository.put(product)
    product_logger.info("Product updated")

    return build_response(200, product.to_response())


@log_invocation(logger)
@api_handler
def delete_product(event: dict, context: Any = None) -> dict:
    """DELETE /product/{id}"""
    product_id = path_parameter(event, "id")
    repository = get_repository()

    repository.get_by_id(product_id)
    # An update that changed category leaves one item per category.
    repository.delete_by_id(product_id)

    logger.for_product(product_id).info("Product deleted")

    return build_response(204)


@log_invocation(logger)
@api_handler
def list_all_products(event: dict, context: Any = None) -> dict:
    """GET /products"""
    products = get_repository().scan_all()

    logger.info(f"Listed {len(products)} products")

    return build_response(200, [p.to_response() for p in products])


# Names used by the existing gateway wiring.
getProduct = get_product
createProduct = create_product
updateProduct = update_product
deleteProduct = delete_product
listAllProducts = list_all_products
