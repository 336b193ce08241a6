"""
Schema validation for inbound product payloads.
Collects every field violation before failing, never stops at the first one.
"""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from products_api.exceptions import ValidationError
from products_api.models import PRODUCT_FIELDS, ProductInput

logger = logging.getLogger(__name__)

# Human readable type names keyed by wire field name.
FIELD_TYPES = {
    "name": "string",
    "category": "string",
    "description": "string",
    "price": "number",
    "isActive": "boolean",
}


class ProductValidator:
    """Validates raw product payloads against the product schema."""

    def __init__(self):
        self.validation_errors: list[str] = []

    def validate(self, payload: Any) -> ProductInput:
        """
        Validate a decoded request body.

        Args:
            payload: Untyped value decoded from the request body

        Returns:
            The typed ProductInput record

        Raises:
            ValidationError: With one message per invalid or missing field
        """
        self.validation_errors = []

        if not isinstance(payload, dict):
            self.validation_errors.append("body must be a `object` type")
            raise ValidationError(list(self.validation_errors))

        try:
            return ProductInput.model_validate(payload)
        except PydanticValidationError as e:
            self.validation_errors = self._collect_messages(e)

        logger.debug(f"Product payload rejected: {self.validation_errors}")
        raise ValidationError(list(self.validation_errors))

    def _collect_messages(self, error: PydanticValidationError) -> list[str]:
        """One message per offending field, in schema order."""
        by_field: dict[str, str] = {}

        for detail in error.errors():
            field_name = str(detail["loc"][0]) if detail["loc"] else "body"
            if field_name in by_field:
                continue
            by_field[field_name] = self._message_for(field_name, detail["type"], detail["msg"])

        ordered = [by_field[name] for name in PRODUCT_FIELDS if name in by_field]
        ordered.extend(msg for name, msg in by_field.items() if name not in PRODUCT_FIELDS)
        return ordered

    @staticmethod
    def _message_for(field_name: str, error_type: str, default: str) -> str:
        if error_type == "missing":
            return f"{field_name} is a required field"
        if field_name in FIELD_TYPES:
            return f"{field_name} must be a `{FIELD_TYPES[field_name]}` type"
        return f"{field_name}: {default}"
