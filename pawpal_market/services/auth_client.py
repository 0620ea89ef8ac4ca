"""
HTTP client for the external auth service, with retry logic
"""
from typing import Optional

import httpx
import structlog
from pydantic import BaseModel
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from pawpal_market.config import settings
from pawpal_market.services.exceptions import AuthenticationError, AuthServiceUnavailableError

logger = structlog.get_logger(__name__)

ADMIN_ROLES = ("admin", "super_admin")


class CurrentUser(BaseModel):
    """Authenticated user as reported by the auth service"""
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    role: str = "user"
    
    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


class AuthServiceClient:
    """
    Client for resolving bearer tokens against the auth service
    
    One instance per process; it owns a pooled httpx.AsyncClient that is
    closed with ``aclose()`` on shutdown.
    """
    
    def __init__(self, base_url: str, timeout: float = 5.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)
    
    async def get_user(self, token: str) -> CurrentUser:
        """
        Resolve a bearer token to its user
        
        Raises:
            AuthenticationError: If the token is rejected
            AuthServiceUnavailableError: If the service cannot be reached
        """
        try:
            response = await self._fetch_user(token)
        except (httpx.TimeoutException, httpx.ConnectError) as e:
            logger.warning("auth_service_unreachable", base_url=self.base_url, error=str(e))
            raise AuthServiceUnavailableError("Authentication service unavailable")
        
        if response.status_code in (401, 403):
            raise AuthenticationError("Unauthenticated.")
        if response.status_code != 200:
            logger.error("auth_service_bad_status", status_code=response.status_code)
            raise AuthServiceUnavailableError(f"Authentication service returned {response.status_code}")
        
        try:
            return CurrentUser.model_validate(response.json())
        except ValueError as e:
            logger.error("auth_service_bad_payload", error=str(e))
            raise AuthServiceUnavailableError("Authentication service returned an invalid user")
    
    @retry(
        stop=stop_after_attempt(settings.MAX_RETRIES),
        wait=wait_exponential(multiplier=settings.RETRY_DELAY, min=1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        reraise=True
    )
    async def _fetch_user(self, token: str) -> httpx.Response:
        return await self._client.get(
            "/api/user",
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"}
        )
    
    async def aclose(self) -> None:
        await self._client.aclose()
