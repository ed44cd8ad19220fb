"""Pytest configuration and shared fixtures"""

import json
import os

import httpx
import pytest

from drupal_jsonapi.client import DrupalClient
from drupal_jsonapi.config import Config

# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)

BASE_URL = "https://cms.example.com"

ARTICLE_UUID = "6c2e0f3a-6a2b-4b8e-9d3a-0f6b1d2c3e4f"


def jsonapi_response(status_code: int, body: dict) -> httpx.Response:
    """Response with the JSON:API media type"""
    return httpx.Response(
        status_code,
        headers={"content-type": "application/vnd.api+json"},
        content=json.dumps(body).encode(),
    )


def article_document(alias: str = "/blog/first-post", langcode: str = "en") -> dict:
    """A single node--article document with one included user"""
    return {
        "jsonapi": {"version": "1.0"},
        "data": {
            "type": "node--article",
            "id": ARTICLE_UUID,
            "attributes": {
                "title": "First post",
                "default_langcode": True,
                "path": {"alias": alias, "pid": 7, "langcode": langcode},
            },
            "relationships": {
                "uid": {"data": {"type": "user--user", "id": "u-1"}},
                "field_tags": {"data": []},
            },
        },
        "included": [
            {"type": "user--user", "id": "u-1", "attributes": {"name": "admin"}},
        ],
    }


def index_document(*types: str) -> dict:
    """JSON:API index with a link for each resource type"""
    links = {"self": {"href": f"{BASE_URL}/jsonapi"}}
    for resource_type in types:
        kind, bundle = resource_type.split("--")
        links[resource_type] = {"href": f"{BASE_URL}/jsonapi/{kind}/{bundle}"}
    return {"data": [], "links": links}


class FakeDrupal:
    """httpx MockTransport handler recording requests and serving canned routes.

    Routes are keyed by ``(method, path)``; values are an httpx.Response or a
    callable taking the request.
    """

    def __init__(self):
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, response):
        self.routes[(method, path)] = response
        return self

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, headers={"content-type": "text/html"})
        return route(request) if callable(route) else route


@pytest.fixture
def fake_drupal():
    """Fake Drupal backend"""
    return FakeDrupal()


@pytest.fixture
def config(clean_env):
    """Config fixture pointing at the fake backend"""
    return Config(base_url=BASE_URL, log_level="DEBUG")


@pytest.fixture
def auth_config(clean_env):
    """Config with client credentials"""
    return Config(
        base_url=BASE_URL,
        client_id="consumer",
        client_secret="s3cret",
        log_level="DEBUG",
    )


def make_client(config: Config, handler, **kwargs) -> DrupalClient:
    """DrupalClient whose httpx client is wired to ``handler``"""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DrupalClient(config, http_client=http_client, **kwargs)


@pytest.fixture
def client(config, fake_drupal):
    """DrupalClient backed by the fake backend"""
    return make_client(config, fake_drupal)


@pytest.fixture
def clean_env():
    """Fixture that temporarily clears DRUPAL_* environment variables.

    This ensures Config tests see the true defaults without interference
    from environment variables that might be set in the user's shell.
    """
    drupal_vars = {
        key: value for key, value in os.environ.items() if key.startswith("DRUPAL_")
    }

    for key in drupal_vars:
        os.environ.pop(key, None)

    try:
        yield
    finally:
        for key, value in drupal_vars.items():
            os.environ[key] = value
