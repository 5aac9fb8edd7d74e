import threading
import time

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.main import app
from app.api.endpoints.lookup import get_connection_manager, get_default_options
from app.core.lookup.connection import ConnectionManager
from app.core.schemas import Entity, LookupOptions


class FakeDynamoDBClient:
    """
    Stands in for boto3's DynamoDB client.

    `items` maps the parameter value to the typed items returned for it,
    `delays` adds latency per parameter and `errors` makes a parameter fail.
    """

    def __init__(self, items=None, delays=None, errors=None):
        self.items = items or {}
        self.delays = delays or {}
        self.errors = errors or {}
        self.requests = []
        self.completed = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def execute_statement(self, Statement, Parameters, Limit=None):
        value = Parameters[0]["S"]
        with self._lock:
            self.requests.append(
                {"Statement": Statement, "Parameters": Parameters, "Limit": Limit}
            )
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            time.sleep(self.delays.get(value, 0.01))
            if value in self.errors:
                raise self.errors[value]
            items = self.items.get(value, [])
            return {"Items": items[:Limit] if Limit else items}
        finally:
            with self._lock:
                self.in_flight -= 1
                self.completed.append(value)


@pytest.fixture
def make_client():
    return FakeDynamoDBClient


@pytest.fixture
def fake_client():
    return FakeDynamoDBClient(
        items={
            "alice": [
                {
                    "id": {"S": "alice"},
                    "name": {"S": "Alice"},
                    "score": {"N": "42"},
                    "profile": {"M": {"team": {"S": "red"}}},
                    "createdAt": {"S": "2024-01-15T13:45:00Z"},
                }
            ],
            "bob": [
                {"id": {"S": "bob"}, "name": {"S": "Bob"}, "score": {"N": "7"}},
                {"id": {"S": "bob"}, "name": {"S": "Bobby"}},
            ],
        }
    )


@pytest.fixture
def manager(fake_client):
    return ConnectionManager(client_factory=lambda options: fake_client)


@pytest.fixture
def options():
    return LookupOptions(
        region="us-east-1",
        access_key_id="test-key",
        secret_access_key="test-secret",
        query='SELECT * FROM "users" WHERE "id" = ?',
        query_parameter="{{entity}}",
        limit=10,
        summary_attributes="Name:name",
        detail_attributes="Name:name, Score:score, Team:profile.team",
        document_title_attribute="User:id",
    )


@pytest.fixture
def entities():
    return [Entity(value="alice"), Entity(value="nobody"), Entity(value="bob")]


# Client
@pytest_asyncio.fixture(scope="function")
async def client(manager, options):
    app.dependency_overrides[get_connection_manager] = lambda: manager
    app.dependency_overrides[get_default_options] = lambda: options

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
