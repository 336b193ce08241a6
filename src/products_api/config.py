"""
Environment-driven configuration for the products Lambda functions.
"""

import os
from dataclasses import dataclass
from typing import Optional

from products_api.exceptions import ConfigurationError


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from the Lambda environment."""
    table_name: str = "ProductsTable"
    default_category: str = "electronics"
    log_level: str = "INFO"
    aws_region: str = "us-east-1"
    dynamodb_endpoint: Optional[str] = None
    service_name: str = "products-api"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            ConfigurationError: If TABLE_NAME or DEFAULT_CATEGORY is set but blank
        """
        table_name = os.environ.get("TABLE_NAME", cls.table_name).strip()
        if not table_name:
            raise ConfigurationError(
                message="TABLE_NAME must not be empty",
                config_key="TABLE_NAME",
            )

        default_category = os.environ.get("DEFAULT_CATEGORY", cls.default_category).strip()
        if not default_category:
            raise ConfigurationError(
                message="DEFAULT_CATEGORY must not be empty",
                config_key="DEFAULT_CATEGORY",
            )

        return cls(
            table_name=table_name,
            default_category=default_category,
            log_level=os.environ.get("LOG_LEVEL", cls.log_level),
            aws_region=os.environ.get("AWS_REGION", cls.aws_region),
            dynamodb_endpoint=(
                os.environ.get("DYNAMODB_ENDPOINT")
                or os.environ.get("LOCALSTACK_ENDPOINT")
                or None
            ),
            service_name=os.environ.get("SERVICE_NAME", cls.service_name),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide Settings instance, loading it on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Forget cached settings (useful for testing)."""
    global _settings
    _settings = None
