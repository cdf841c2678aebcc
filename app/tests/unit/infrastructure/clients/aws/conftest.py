"""Fixtures for AWS client tests.

Provides a factory-as-fixture for configurable fake boto3 clients, so no
test ever reaches AWS. Tests monkeypatch
``infrastructure.clients.aws.executor.get_boto3_client`` to return them.
"""

from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from infrastructure.clients.aws import AWSClients
from infrastructure.clients.aws import executor as aws_executor
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.configuration.integrations.aws import AwsSettings


class FakePaginator:
    """Fake boto3 paginator that yields provided pages."""

    def __init__(self, pages):
        self._pages = list(pages)

    def paginate(self, **kwargs):
        for page in self._pages:
            yield page


class FakeClient:
    """Configurable fake boto3 client.

    Supports:
    - Paginated responses via `get_paginator()`
    - API method responses, static or callable (called with the kwargs)
    - Recording of every call in `calls`
    """

    def __init__(
        self,
        paginated_pages: Optional[List[Dict[str, Any]]] = None,
        api_responses: Optional[Dict[str, Any]] = None,
    ):
        self._paginated_pages = paginated_pages or []
        self._api_responses = api_responses or {}
        self.calls: List[tuple] = []

    def get_paginator(self, method_name):
        return FakePaginator(self._paginated_pages)

    def can_paginate(self, method_name: str) -> bool:
        return bool(self._paginated_pages)

    def __getattr__(self, name: str):
        if name.startswith("_") or name not in self._api_responses:
            raise AttributeError(name)
        resp = self._api_responses[name]

        def _call(**kwargs):
            self.calls.append((name, kwargs))
            if isinstance(resp, Exception):
                raise resp
            if callable(resp):
                return resp(**kwargs)
            return resp

        return _call


@pytest.fixture
def make_fake_client():
    """Factory fixture for creating configurable fake boto3 clients.

    Usage:
        def test_something(monkeypatch, make_fake_client):
            client = make_fake_client(api_responses={"send_email": {...}})
            monkeypatch.setattr(
                aws_executor, "get_boto3_client", lambda *a, **k: client
            )
    """

    def _factory(
        paginated_pages: Optional[List[Dict[str, Any]]] = None,
        api_responses: Optional[Dict[str, Any]] = None,
    ) -> FakeClient:
        return FakeClient(paginated_pages=paginated_pages, api_responses=api_responses)

    return _factory


@pytest.fixture
def use_fake_client(monkeypatch):
    """Route every boto3 client creation to the given fake client."""

    def _install(client: FakeClient) -> FakeClient:
        monkeypatch.setattr(
            aws_executor, "get_boto3_client", lambda *args, **kwargs: client
        )
        return client

    return _install


@pytest.fixture(autouse=True)
def no_backoff_sleep(monkeypatch):
    """Retries in the executor never actually sleep in unit tests."""
    monkeypatch.setattr(aws_executor.time, "sleep", lambda _seconds: None)


@pytest.fixture
def mock_aws_settings():
    """Mock AwsSettings with a fixed region and no custom endpoint."""
    settings = MagicMock(spec=AwsSettings)
    settings.AWS_REGION = "us-east-1"
    settings.ENDPOINT_URL = None
    return settings


@pytest.fixture
def aws_factory(mock_aws_settings):
    """AWSClients facade built from mock settings."""
    return AWSClients(aws_settings=mock_aws_settings)


@pytest.fixture
def session_provider():
    return SessionProvider(region="us-east-1")
