"""
Data access for products stored in DynamoDB.

The table key is (productID HASH, category RANGE). Lookups by productID
alone are therefore partition-key queries rather than GetItem calls.
Store failures (throttling, service unavailable, access denied) are not
handled here; botocore's ClientError propagates to the caller.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import boto3
from botocore.config import Config

from products_api.config import Settings, get_settings
from products_api.exceptions import NotFoundError
from products_api.models import Product

logger = logging.getLogger(__name__)

boto_config = Config(
    retries={"max_attempts": 3, "mode": "standard"},
    connect_timeout=5,
    read_timeout=10,
)


class AWSClientFactory:
    """Lazily creates process-wide AWS resources, reused across warm invocations."""

    _dynamodb_resource = None

    @classmethod
    def get_dynamodb_resource(cls, settings: Optional[Settings] = None):
        """Get or create the DynamoDB service resource."""
        if cls._dynamodb_resource is None:
            settings = settings or get_settings()
            kwargs = {"config": boto_config, "region_name": settings.aws_region}
            if settings.dynamodb_endpoint:
                kwargs["endpoint_url"] = settings.dynamodb_endpoint
            cls._dynamodb_resource = boto3.resource("dynamodb", **kwargs)
        return cls._dynamodb_resource

    @classmethod
    def get_products_table(cls, settings: Optional[Settings] = None):
        """Get the products Table resource."""
        settings = settings or get_settings()
        return cls.get_dynamodb_resource(settings).Table(settings.table_name)

    @classmethod
    def reset(cls):
        """Reset clients (useful for testing)."""
        cls._dynamodb_resource = None


class ProductRepository(ABC):
    """Storage boundary for products."""

    @abstractmethod
    def find_by_id(self, product_id: str) -> Optional[Product]:
        """Find a product by its ID, or None when it does not exist."""
        ...

    @abstractmethod
    def put(self, product: Product) -> None:
        """Create or overwrite a product under its composite key."""
        ...

    @abstractmethod
    def delete_by_id(self, product_id: str, category: Optional[str] = None) -> None:
        """Delete a product. Deleting a missing product is not an error."""
        ...

    @abstractmethod
    def scan_all(self) -> list[Product]:
        """Return every stored product, in no particular order."""
        ...

    def get_by_id(self, product_id: str) -> Product:
        """
        Fetch a product by its ID.

        Raises:
            NotFoundError: If no product has this ID
        """
        product = self.find_by_id(product_id)
        if product is None:
            raise NotFoundError(product_id)
        return product


class DynamoProductRepository(ProductRepository):
    """ProductRepository backed by a boto3 DynamoDB Table resource."""

    def __init__(self, table):
        self.table = table

    def find_by_id(self, product_id: str) -> Optional[Product]:
        items = self._query_partition(product_id, limit=1)
        if not items:
            logger.debug(f"No item stored under productID {product_id}")
            return None
        return Product.from_item(items[0])

    def put(self, product: Product) -> None:
        self.table.put_item(Item=product.to_item())

    def delete_by_id(self, product_id: str, category: Optional[str] = None) -> None:
        if category is not None:
            keys = [{"productID": product_id, "category": category}]
        else:
            keys = [
                {"productID": item["productID"], "category": item["category"]}
                for item in self._query_partition(product_id)
            ]

        for key in keys:
            self.table.delete_item(Key=key)

    def scan_all(self) -> list[Product]:
        items: list[dict] = []
        scan_kwargs: dict = {}

        while True:
            response = self.table.scan(**scan_kwargs)
            items.extend(response.get("Items", []))

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            scan_kwargs["ExclusiveStartKey"] = last_key

        logger.debug(f"Scanned {len(items)} products")
        return [Product.from_item(item) for item in items]

    def _query_partition(self, product_id: str, limit: Optional[int] = None) -> list[dict]:
        query_kwargs = {
            "KeyConditionExpression": "productID = :pid",
            "ExpressionAttributeValues": {":pid": product_id},
        }
        if limit is not None:
            query_kwargs["Limit"] = limit

        response = self.table.query(**query_kwargs)
        return response.get("Items", [])
