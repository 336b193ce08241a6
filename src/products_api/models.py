"""
Data models for the products API.
Wire and storage field names are camelCase; Python attributes are snake_case.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_serializer

# Wire name -> Python attribute, in schema order.
PRODUCT_FIELDS = {
    "name": "name",
    "category": "category",
    "description": "description",
    "price": "price",
    "isActive": "is_active",
}


def from_dynamo(value: Any) -> Any:
    """Convert DynamoDB Decimals back to int/float, recursively."""
    if isinstance(value, Decimal):
        if value % 1 == 0:
            return int(value)
        return float(value)
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    return value


def to_dynamo(value: Any) -> Any:
    """Convert floats to Decimal for DynamoDB, recursively."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_dynamo(v) for v in value]
    return value


class ProductInput(BaseModel):
    """Validated product payload as sent by a client on create or update."""
    name: StrictStr
    category: StrictStr
    description: StrictStr
    price: float = Field(strict=True, allow_inf_nan=False)
    is_active: StrictBool = Field(alias="isActive")


class Product(BaseModel):
    """A stored product, keyed by (productID, category)."""
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productID")
    category: str
    name: str
    description: str
    price: float
    is_active: bool = Field(alias="isActive")

    @field_serializer("price")
    def _serialize_price(self, price):
        # Whole prices render as ints, matching what DynamoDB hands back.
        if isinstance(price, float) and price.is_integer():
            return int(price)
        return price

    @classmethod
    def from_input(
        cls,
        payload: ProductInput,
        product_id: str,
        category: Optional[str] = None,
    ) -> "Product":
        """Build a product from a validated payload, optionally overriding its category."""
        return cls(
            product_id=product_id,
            category=category if category is not None else payload.category,
            name=payload.name,
            description=payload.description,
            price=payload.price,
            is_active=payload.is_active,
        )

    @classmethod
    def from_item(cls, item: dict) -> "Product":
        """
        Build a product from a raw DynamoDB item.

        Stored items are trusted: they were validated when written, so no
        validation runs here.
        """
        item = from_dynamo(item)
        return cls.model_construct(
            product_id=item.get("productID"),
            category=item.get("category"),
            name=item.get("name"),
            description=item.get("description"),
            price=item.get("price"),
            is_active=item.get("isActive"),
        )

    def to_item(self) -> dict:
        """Render the DynamoDB item for this product."""
        return to_dynamo(self.to_response())

    def to_response(self) -> dict:
        """Render the camelCase JSON representation."""
        return self.model_dump(by_alias=True)
