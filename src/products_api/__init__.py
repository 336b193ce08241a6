"""
Products CRUD API - AWS Lambda handlers over a DynamoDB table.

Five stateless handlers (get, create, update, delete, list) sit behind
API Gateway and a Cognito authorizer and map each request onto one or two
DynamoDB calls.
"""

from products_api.exceptions import (
    ConfigurationError,
    ErrorKind,
    HttpError,
    NotFoundError,
    ProductsApiError,
    RequestBodySyntaxError,
    ValidationError,
)
from products_api.handler import (
    create_product,
    delete_product,
    get_product,
    list_all_products,
    update_product,
)
from products_api.models import Product, ProductInput
from products_api.repository import DynamoProductRepository, ProductRepository
from products_api.validator import ProductValidator

__all__ = [
    "get_product",
    "create_product",
    "update_product",
    "delete_product",
    "list_all_products",
    "Product",
    "ProductInput",
    "ProductRepository",
    "DynamoProductRepository",
    "ProductValidator",
    "ProductsApiError",
    "ErrorKind",
    "ValidationError",
    "RequestBodySyntaxError",
    "HttpError",
    "NotFoundError",
    "ConfigurationError",
]

__version__ = "1.0.0"
