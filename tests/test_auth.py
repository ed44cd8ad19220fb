"""Tests for AuthManager token lifecycle"""

import asyncio
import base64
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from drupal_jsonapi.auth import AuthManager
from drupal_jsonapi.config import Config
from drupal_jsonapi.exceptions import AuthenticationError, ConfigError
from drupal_jsonapi.models import AccessToken


def token_endpoint(fake_drupal, expires_in=300):
    counter = {"n": 0}

    def issue(request: httpx.Request) -> httpx.Response:
        counter["n"] += 1
        return httpx.Response(
            200,
            json={
                "token_type": "Bearer",
                "expires_in": expires_in,
                "access_token": f"token-{counter['n']}",
            },
        )

    fake_drupal.add("POST", "/oauth/token", issue)
    return counter


@pytest.fixture
def auth_manager(auth_config, fake_drupal):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_drupal))
    return AuthManager(auth_config, http_client)


class TestGetAccessToken:
    """Token fetching and caching"""

    @pytest.mark.asyncio
    async def test_fetches_token_with_basic_auth(self, auth_manager, fake_drupal):
        token_endpoint(fake_drupal)

        token = await auth_manager.get_access_token()

        assert token.access_token == "token-1"
        assert token.expires_in == 300
        [request] = fake_drupal.calls("POST", "/oauth/token")
        expected = base64.b64encode(b"consumer:s3cret").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert request.content == b"grant_type=client_credentials"

    @pytest.mark.asyncio
    async def test_cached_token_reused_until_expiry(self, auth_manager, fake_drupal):
        counter = token_endpoint(fake_drupal)

        first = await auth_manager.get_access_token()
        second = await auth_manager.get_access_token()

        assert second is first
        assert counter["n"] == 1

    @pytest.mark.asyncio
    async def test_expired_token_refetched_once_per_call(self, auth_manager, fake_drupal):
        counter = token_endpoint(fake_drupal)

        first = await auth_manager.get_access_token()
        first.issued_at = datetime.now(UTC) - timedelta(seconds=301)

        second = await auth_manager.get_access_token()
        third = await auth_manager.get_access_token()

        assert second.access_token == "token-2"
        assert third is second
        assert counter["n"] == 2

    @pytest.mark.asyncio
    async def test_get_valid_token_returns_string(self, auth_manager, fake_drupal):
        token_endpoint(fake_drupal)
        assert await auth_manager.get_valid_token() == "token-1"

    @pytest.mark.asyncio
    async def test_concurrent_refresh_tolerated(self, auth_manager, fake_drupal):
        """Concurrent first calls may each fetch; any resulting token is valid"""
        counter = token_endpoint(fake_drupal)

        tokens = await asyncio.gather(
            auth_manager.get_access_token(), auth_manager.get_access_token()
        )

        assert 1 <= counter["n"] <= 2
        assert auth_manager.token.access_token in {t.access_token for t in tokens}

    @pytest.mark.asyncio
    async def test_non_success_raises_authentication_error(
        self, auth_manager, fake_drupal
    ):
        fake_drupal.add("POST", "/oauth/token", httpx.Response(401))

        with pytest.raises(AuthenticationError) as exc_info:
            await auth_manager.get_access_token()

        assert exc_info.value.message == "Unauthorized"
        assert exc_info.value.context["status_code"] == 401
        assert auth_manager.token is None

    @pytest.mark.asyncio
    async def test_clear_forgets_token(self, auth_manager, fake_drupal):
        counter = token_endpoint(fake_drupal)
        await auth_manager.get_access_token()
        auth_manager.clear()
        await auth_manager.get_access_token()
        assert counter["n"] == 2


class TestAuthConfiguration:
    """Configuration errors"""

    @pytest.mark.asyncio
    async def test_absolute_auth_url_used_for_token_request(self, clean_env):
        config = Config(
            base_url="https://cms.example.com",
            client_id="consumer",
            client_secret="s3cret",
            auth_url="https://sso.example.com/token",
        )
        seen = []

        def issue(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"access_token": "t", "expires_in": 60})

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(issue))
        await AuthManager(config, http_client).get_access_token()

        assert seen == ["https://sso.example.com/token"]

    @pytest.mark.asyncio
    async def test_auth_not_configured(self, config):
        manager = AuthManager(config, httpx.AsyncClient())
        with pytest.raises(ConfigError, match="auth is not configured"):
            await manager.get_access_token()

    @pytest.mark.asyncio
    async def test_missing_secret(self, clean_env):
        config = Config(base_url="https://cms.example.com", client_id="consumer")
        manager = AuthManager(config, httpx.AsyncClient())
        with pytest.raises(ConfigError, match="client_secret"):
            await manager.get_access_token()


class TestAccessToken:
    def test_valid_strictly_before_expiry(self):
        issued = datetime(2024, 1, 1, tzinfo=UTC)
        token = AccessToken(access_token="t", expires_in=60, issued_at=issued)

        assert token.is_valid(issued + timedelta(seconds=59))
        assert not token.is_valid(issued + timedelta(seconds=60))
        assert token.expires_at == issued + timedelta(seconds=60)
