"""Tests for product data access."""

from decimal import Decimal
from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import ClientError

from products_api.config import Settings
from products_api.exceptions import NotFoundError
from products_api.models import Product
from products_api.repository import AWSClientFactory, DynamoProductRepository


def _product(product_id="p-1", category="electronics", **overrides):
    fields = {
        "product_id": product_id,
        "category": category,
        "name": "Kettle",
        "description": "1.7L",
        "price": 24.5,
        "is_active": True,
    }
    fields.update(overrides)
    return Product(**fields)


class TestDynamoProductRepository:
    """Tests for DynamoProductRepository against the in-memory table."""

    def test_put_then_find(self, repository):
        """Test a stored product can be found by ID."""
        repository.put(_product())

        found = repository.find_by_id("p-1")

        assert found is not None
        assert found.name == "Kettle"
        assert found.price == 24.5
        assert found.category == "electronics"

    def test_find_missing_returns_none(self, repository):
        """Test a missing ID is a None result."""
        assert repository.find_by_id("missing") is None

    def test_get_missing_raises_not_found(self, repository):
        """Test get_by_id raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            repository.get_by_id("missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.body == {"error": "not found"}
        assert exc_info.value.product_id == "missing"

    def test_put_overwrites_same_key(self, repository, products_table):
        """Test put is an upsert on the composite key."""
        repository.put(_product(name="Old"))
        repository.put(_product(name="New"))

        assert len(products_table.items) == 1
        assert repository.get_by_id("p-1").name == "New"

    def test_delete_with_category(self, repository, products_table):
        """Test delete removes the keyed item."""
        repository.put(_product())

        repository.delete_by_id("p-1", "electronics")

        assert products_table.items == {}

    def test_delete_without_category_removes_partition(self, repository, products_table):
        """Test delete by ID alone removes every item under the ID."""
        repository.put(_product(category="electronics"))
        repository.put(_product(category="clearance"))
        repository.put(_product(product_id="p-2"))

        repository.delete_by_id("p-1")

        assert list(products_table.items) == [("p-2", "electronics")]

    def test_delete_missing_is_not_an_error(self, repository):
        """Test delete is idempotent."""
        repository.delete_by_id("missing")
        repository.delete_by_id("missing", "electronics")

    def test_scan_all_follows_pagination(self, repository, products_table):
        """Test scan reads every page."""
        products_table.page_size = 3
        for i in range(7):
            repository.put(_product(product_id=f"p-{i}"))

        products = repository.scan_all()

        assert sorted(p.product_id for p in products) == [f"p-{i}" for i in range(7)]
        assert products_table.calls.count("scan") == 3

    def test_scan_empty_table(self, repository):
        """Test scan of an empty table."""
        assert repository.scan_all() == []

    def test_reads_are_not_revalidated(self, repository, products_table):
        """Test stored items with unexpected shapes are still returned."""
        products_table.items[("legacy", "electronics")] = {
            "productID": "legacy",
            "category": "electronics",
            "name": "Old thing",
            "price": Decimal("3"),
        }

        product = repository.get_by_id("legacy")

        assert product.name == "Old thing"
        assert product.price == 3
        assert product.description is None


class TestStoreErrors:
    """Tests for store failures."""

    def test_client_error_propagates(self):
        """Test ClientError is not wrapped or swallowed."""
        table = Mock()
        table.query.side_effect = ClientError(
            {"Error": {"Code": "ServiceUnavailable", "Message": "down"}},
            "Query",
        )
        repository = DynamoProductRepository(table)

        with pytest.raises(ClientError):
            repository.find_by_id("p-1")

    def test_find_uses_partition_query(self):
        """Test lookup queries the partition key with a limit of one."""
        table = Mock()
        table.query.return_value = {"Items": []}

        DynamoProductRepository(table).find_by_id("p-9")

        table.query.assert_called_once_with(
            KeyConditionExpression="productID = :pid",
            ExpressionAttributeValues={":pid": "p-9"},
            Limit=1,
        )


class TestAWSClientFactory:
    """Tests for AWSClientFactory."""

    def setup_method(self):
        AWSClientFactory.reset()

    def teardown_method(self):
        AWSClientFactory.reset()

    def test_resource_is_created_once(self):
        """Test the DynamoDB resource is shared."""
        settings = Settings(table_name="t")
        with patch("products_api.repository.boto3.resource") as resource:
            first = AWSClientFactory.get_dynamodb_resource(settings)
            second = AWSClientFactory.get_dynamodb_resource(settings)

        assert first is second
        resource.assert_called_once()

    def test_endpoint_override(self):
        """Test a local endpoint is passed through."""
        settings = Settings(table_name="t", dynamodb_endpoint="http://localhost:4566")
        with patch("products_api.repository.boto3.resource") as resource:
            AWSClientFactory.get_dynamodb_resource(settings)

        assert resource.call_args.kwargs["endpoint_url"] == "http://localhost:4566"

    def test_products_table_uses_configured_name(self):
        """Test the table resource is looked up by name."""
        settings = Settings(table_name="my-products")
        with patch("products_api.repository.boto3.resource") as resource:
            AWSClientFactory.get_products_table(settings)

        resource.return_value.Table.assert_called_once_with("my-products")
