"""Tests for DrupalClient request execution and error classification"""

import json
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from conftest import BASE_URL, jsonapi_response, make_client

from drupal_jsonapi.client import (
    DrupalClient,
    format_error_response,
    format_jsonapi_errors,
)
from drupal_jsonapi.config import Config
from drupal_jsonapi.consts import USER_AGENT
from drupal_jsonapi.exceptions import ConfigError, RequestError


class TestConstruction:
    def test_missing_base_url(self, clean_env):
        with pytest.raises(ConfigError, match="base_url"):
            DrupalClient(Config())

    def test_partial_credentials_rejected(self, clean_env):
        with pytest.raises(ConfigError, match="client_secret"):
            DrupalClient(Config(base_url=BASE_URL, client_id="consumer"))

    def test_default_http_client(self, config):
        client = DrupalClient(config)
        assert client.http_client.headers["User-Agent"] == USER_AGENT
        assert client.base_url == BASE_URL
        assert client.api_prefix == "/jsonapi"
        assert client.front_page == "/home"

    def test_build_url(self, client):
        url = client.build_url("/jsonapi/node/article", {"filter[status]": "1"})
        assert str(url) == f"{BASE_URL}/jsonapi/node/article?filter%5Bstatus%5D=1"

    def test_resolve_with_auth_defaults_to_config(self, clean_env):
        client = DrupalClient(Config(base_url=BASE_URL, with_auth=True))
        assert client.resolve_with_auth(None) is True
        assert client.resolve_with_auth(False) is False


class TestFetch:
    """fetch() header handling"""

    @pytest.mark.asyncio
    async def test_default_and_call_headers_merged(self, client, fake_drupal):
        fake_drupal.add("GET", "/jsonapi", jsonapi_response(200, {"data": []}))

        await client.fetch(f"{BASE_URL}/jsonapi", headers={"X-Extra": "1"})

        [request] = fake_drupal.requests
        assert request.headers["Accept"] == "application/vnd.api+json"
        assert request.headers["Content-Type"] == "application/vnd.api+json"
        assert request.headers["X-Extra"] == "1"
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_with_auth_uses_token_provider(self, config, fake_drupal):
        fake_drupal.add("GET", "/jsonapi", jsonapi_response(200, {"data": []}))
        token_provider = Mock()
        token_provider.get_valid_token = AsyncMock(return_value="abc")
        client = make_client(config, fake_drupal, token_provider=token_provider)

        await client.fetch(f"{BASE_URL}/jsonapi", with_auth=True)

        assert fake_drupal.requests[0].headers["Authorization"] == "Bearer abc"
        token_provider.get_valid_token.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_custom_auth_takes_precedence(self, config, fake_drupal):
        fake_drupal.add("GET", "/jsonapi", jsonapi_response(200, {"data": []}))
        token_provider = Mock()
        token_provider.get_valid_token = AsyncMock(return_value="abc")
        client = make_client(
            config,
            fake_drupal,
            auth=lambda: "Basic dXNlcjpwYXNz",
            token_provider=token_provider,
        )

        await client.fetch(f"{BASE_URL}/jsonapi", with_auth=True)

        assert fake_drupal.requests[0].headers["Authorization"] == "Basic dXNlcjpwYXNz"
        token_provider.get_valid_token.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_client_credentials_end_to_end(self, auth_config, fake_drupal):
        fake_drupal.add(
            "POST",
            "/oauth/token",
            httpx.Response(200, json={"access_token": "xyz", "expires_in": 300}),
        )
        fake_drupal.add("GET", "/jsonapi", jsonapi_response(200, {"data": []}))
        client = make_client(auth_config, fake_drupal)

        await client.fetch(f"{BASE_URL}/jsonapi", with_auth=True)
        await client.fetch(f"{BASE_URL}/jsonapi", with_auth=True)

        assert len(fake_drupal.calls("POST", "/oauth/token")) == 1
        for request in fake_drupal.calls("GET", "/jsonapi"):
            assert request.headers["Authorization"] == "Bearer xyz"

    @pytest.mark.asyncio
    async def test_custom_fetcher_used(self, config):
        fetcher = AsyncMock(return_value=jsonapi_response(200, {"data": []}))
        client = DrupalClient(config, fetcher=fetcher)

        response = await client.fetch(f"{BASE_URL}/jsonapi", method="POST", content="{}")

        assert response.status_code == 200
        fetcher.assert_awaited_once()
        args, kwargs = fetcher.call_args
        assert args == (f"{BASE_URL}/jsonapi",)
        assert kwargs["method"] == "POST"
        assert kwargs["content"] == "{}"
        assert kwargs["headers"]["Accept"] == "application/vnd.api+json"

    @pytest.mark.asyncio
    async def test_custom_fetcher_errors_classified(self, config):
        fetcher = AsyncMock(return_value=httpx.Response(503))
        client = DrupalClient(config, fetcher=fetcher)

        with pytest.raises(RequestError, match="Service Unavailable"):
            await client.fetch(f"{BASE_URL}/jsonapi")

    @pytest.mark.asyncio
    async def test_network_errors_propagate(self, config):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        client = make_client(config, refuse)
        with pytest.raises(httpx.ConnectError):
            await client.fetch(f"{BASE_URL}/jsonapi")

    @pytest.mark.asyncio
    async def test_fetch_json(self, client, fake_drupal):
        fake_drupal.add("GET", "/jsonapi", jsonapi_response(200, {"data": [1]}))
        assert await client.fetch_json(f"{BASE_URL}/jsonapi") == {"data": [1]}


class TestErrorClassification:
    """Non-success responses become RequestError with a derived message"""

    @pytest.mark.asyncio
    async def test_jsonapi_error_message(self, client, fake_drupal):
        fake_drupal.add(
            "GET",
            "/jsonapi/node/article",
            jsonapi_response(404, {"errors": [{"status": "404", "title": "Not Found"}]}),
        )

        with pytest.raises(RequestError) as exc_info:
            await client.fetch(f"{BASE_URL}/jsonapi/node/article")

        assert exc_info.value.message == "404 Not Found"
        assert exc_info.value.status_code == 404
        assert exc_info.value.context["url"] == f"{BASE_URL}/jsonapi/node/article"

    @pytest.mark.asyncio
    async def test_jsonapi_error_with_detail(self, client, fake_drupal):
        fake_drupal.add(
            "GET",
            "/jsonapi/node/article",
            jsonapi_response(
                403,
                {
                    "errors": [
                        {"status": "403", "title": "Forbidden", "detail": "No access."},
                        {"status": "403", "title": "Ignored"},
                    ]
                },
            ),
        )

        with pytest.raises(RequestError) as exc_info:
            await client.fetch(f"{BASE_URL}/jsonapi/node/article")

        assert str(exc_info.value) == "403 Forbidden\nNo access."

    @pytest.mark.asyncio
    async def test_plain_json_message(self, client, fake_drupal):
        fake_drupal.add(
            "POST",
            "/subrequests",
            httpx.Response(400, json={"message": "Malformed payload"}),
        )

        with pytest.raises(RequestError, match="Malformed payload"):
            await client.fetch(f"{BASE_URL}/subrequests", method="POST")

    @pytest.mark.asyncio
    async def test_falls_back_to_reason_phrase(self, client, fake_drupal):
        with pytest.raises(RequestError) as exc_info:
            await client.fetch(f"{BASE_URL}/missing")
        assert exc_info.value.message == "Not Found"


class TestFormatting:
    def test_format_jsonapi_errors_first_only(self):
        errors = [{"status": "404", "title": "Not Found"}, {"status": "500", "title": "X"}]
        assert format_jsonapi_errors(errors) == "404 Not Found"

    def test_content_type_parameters_ignored(self):
        response = httpx.Response(
            422,
            headers={"content-type": "application/vnd.api+json; charset=utf-8"},
            content=json.dumps(
                {"errors": [{"status": "422", "title": "Unprocessable Content"}]}
            ).encode(),
        )
        assert format_error_response(response) == "422 Unprocessable Content"

    def test_json_body_that_is_not_an_object(self):
        assert format_error_response(httpx.Response(502, json=["bad gateway"])) == (
            "Bad Gateway"
        )
        response = jsonapi_response(500, ["oops"])
        assert format_error_response(response) == "Internal Server Error"

    def test_jsonapi_without_errors_uses_reason(self):
        response = jsonapi_response(500, {"meta": {}})
        assert format_error_response(response) == "Internal Server Error"


class TestDeserialize:
    def test_empty_body_is_none(self, client):
        assert client.deserialize(None) is None
        assert client.deserialize({}) is None

    def test_custom_deserializer(self, config):
        deserializer = Mock()
        deserializer.deserialize.return_value = {"custom": True}
        client = DrupalClient(config, deserializer=deserializer)

        assert client.deserialize({"data": {}}) == {"custom": True}
        deserializer.deserialize.assert_called_once_with({"data": {}})
