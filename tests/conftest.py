"""Pytest fixtures and configuration."""

import base64
import copy
import json
import os
from types import SimpleNamespace

import pytest

os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["TABLE_NAME"] = "test-products-table"
os.environ.pop("DEFAULT_CATEGORY", None)

from products_api import handler  # noqa: E402
from products_api.config import reset_settings  # noqa: E402
from products_api.repository import DynamoProductRepository  # noqa: E402


def _reject_floats(value, path="Item"):
    """boto3's resource layer refuses Python floats; so does the fake."""
    if isinstance(value, float):
        raise TypeError(f"Float types are not supported. Use Decimal types instead ({path})")
    if isinstance(value, dict):
        for k, v in value.items():
            _reject_floats(v, f"{path}.{k}")
    if isinstance(value, list):
        for i, v in enumerate(value):
            _reject_floats(v, f"{path}[{i}]")


class FakeProductsTable:
    """
    In-memory stand-in for a boto3 DynamoDB Table with key
    (productID HASH, category RANGE).
    """

    def __init__(self, page_size=None):
        self.items: dict[tuple, dict] = {}
        self.page_size = page_size
        self.calls: list[str] = []

    def put_item(self, Item):
        self.calls.append("put_item")
        _reject_floats(Item)
        self.items[(Item["productID"], Item["category"])] = copy.deepcopy(Item)
        return {}

    def delete_item(self, Key):
        self.calls.append("delete_item")
        self.items.pop((Key["productID"], Key["category"]), None)
        return {}

    def query(self, KeyConditionExpression, ExpressionAttributeValues, Limit=None):
        self.calls.append("query")
        assert KeyConditionExpression == "productID = :pid"
        product_id = ExpressionAttributeValues[":pid"]
        matches = [
            copy.deepcopy(self.items[key])
            for key in sorted(self.items)
            if key[0] == product_id
        ]
        if Limit is not None:
            matches = matches[:Limit]
        return {"Items": matches, "Count": len(matches)}

    def scan(self, ExclusiveStartKey=None):
        self.calls.append("scan")
        keys = sorted(self.items)
        start = 0
        if ExclusiveStartKey:
            start = keys.index(
                (ExclusiveStartKey["productID"], ExclusiveStartKey["category"])
            ) + 1
        end = len(keys) if self.page_size is None else min(start + self.page_size, len(keys))

        response = {"Items": [copy.deepcopy(self.items[k]) for k in keys[start:end]]}
        if end < len(keys):
            last = keys[end - 1]
            response["LastEvaluatedKey"] = {"productID": last[0], "category": last[1]}
        return response


@pytest.fixture(autouse=True)
def fresh_settings():
    """Reload settings from the environment for every test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def products_table():
    """Return an empty in-memory products table."""
    return FakeProductsTable()


@pytest.fixture
def repository(products_table):
    """Return a DynamoProductRepository over the in-memory table."""
    return DynamoProductRepository(products_table)


@pytest.fixture
def installed_repository(repository):
    """Make the handlers use the in-memory repository."""
    handler.set_repository(repository)
    yield repository
    handler.set_repository(None)


@pytest.fixture
def lambda_context():
    """Return a minimal Lambda context object."""
    return SimpleNamespace(
        aws_request_id="req-0001",
        function_name="products-api-test",
    )


@pytest.fixture
def valid_payload():
    """Return a product payload that satisfies the schema."""
    return {
        "name": "Noise Cancelling Headphones",
        "category": "audio",
        "description": "Over-ear, 30h battery",
        "price": 199.99,
        "isActive": True,
    }


@pytest.fixture
def api_event():
    """Return a builder for API Gateway proxy events."""

    def build(body=None, path_parameters=None, base64_encoded=False):
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if base64_encoded and body is not None:
            body = base64.b64encode(body.encode("utf-8")).decode("ascii")
        return {
            "body": body,
            "pathParameters": path_parameters,
            "isBase64Encoded": base64_encoded,
            "headers": {"authorization": "Bearer test-token"},
        }

    return build
