"""
Shared FastAPI dependencies
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pawpal_market.publishers.event_publisher import EventPublisher
from pawpal_market.services.auth_client import AuthServiceClient, CurrentUser
from pawpal_market.services.exceptions import AuthenticationError, PermissionDeniedError

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_client(request: Request) -> AuthServiceClient:
    """Process-wide auth client created in main"""
    return request.app.state.auth_client


def get_event_publisher(request: Request) -> EventPublisher:
    """Process-wide event publisher created in main"""
    return request.app.state.event_publisher


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_client: AuthServiceClient = Depends(get_auth_client)
) -> CurrentUser:
    """Resolve the bearer token to a user"""
    if credentials is None:
        raise AuthenticationError("Unauthenticated.")
    return await auth_client.get_user(credentials.credentials)


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Allow only admin and super_admin roles"""
    if not user.is_admin:
        raise PermissionDeniedError("Unauthorized. Admin access required.")
    return user
