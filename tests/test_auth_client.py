"""Tests for the auth service client."""

import asyncio

import httpx
import pytest
from tenacity import wait_none

from pawpal_market.services.auth_client import AuthServiceClient, CurrentUser
from pawpal_market.services.exceptions import AuthenticationError, AuthServiceUnavailableError


@pytest.fixture(autouse=True)
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(AuthServiceClient._fetch_user.retry, "wait", wait_none())


def resolve(handler, token="token"):
    async def run():
        client = AuthServiceClient("http://auth.test/", transport=httpx.MockTransport(handler))
        try:
            return await client.get_user(token)
        finally:
            await client.aclose()

    return asyncio.run(run())


class TestAuthServiceClient:
    """Tests for AuthServiceClient.get_user."""

    def test_resolves_user(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"id": 5, "name": "Dana", "email": "d@example.com", "role": "super_admin"})

        user = resolve(handler, token="abc")

        assert user == CurrentUser(id=5, name="Dana", email="d@example.com", role="super_admin")
        assert user.is_admin
        assert seen[0].url.path == "/api/user"
        assert seen[0].headers["Authorization"] == "Bearer abc"

    def test_plain_user_is_not_admin(self):
        user = resolve(lambda request: httpx.Response(200, json={"id": 6}))

        assert user.role == "user"
        assert not user.is_admin

    @pytest.mark.parametrize("status_code", [401, 403])
    def test_rejected_token(self, status_code):
        with pytest.raises(AuthenticationError, match="Unauthenticated."):
            resolve(lambda request: httpx.Response(status_code, json={"message": "Unauthenticated."}))

    def test_server_error(self):
        with pytest.raises(AuthServiceUnavailableError) as exc_info:
            resolve(lambda request: httpx.Response(500))

        assert exc_info.value.status_code == 503

    def test_invalid_payload(self):
        with pytest.raises(AuthServiceUnavailableError):
            resolve(lambda request: httpx.Response(200, json={"name": "No id"}))

    def test_unreachable_service_is_retried(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(AuthServiceUnavailableError, match="unavailable"):
            resolve(handler)

        assert len(attempts) == 3

    def test_recovers_after_transient_timeout(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) == 1:
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200, json={"id": 8})

        assert resolve(handler).id == 8
        assert len(attempts) == 2
