"""
FastAPI dependencies for authentication and database sessions.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.database import get_db
from conduit.kernel.identity.context import OptionalAuth, RequiredAuth
from conduit.kernel.identity.jwt import Principal
from conduit.logging_config import principal_var

# The RealWorld scheme is "Token <jwt>", which HTTPBearer would reject
authorization_header = APIKeyHeader(
    name="Authorization",
    scheme_name="Token",
    description="Token <jwt>",
    auto_error=False,
)

required_auth = RequiredAuth()
optional_auth = OptionalAuth()


DbSession = Annotated[AsyncSession, Depends(get_db)]


def _remember(principal: Optional[Principal]) -> Optional[Principal]:
    if principal is not None:
        principal_var.set(str(principal.user_id))
    return principal


async def get_current_principal(
    authorization: Annotated[Optional[str], Depends(authorization_header)],
) -> Principal:
    """Authenticated caller or 401."""
    return _remember(required_auth.extract(authorization))


async def get_optional_principal(
    authorization: Annotated[Optional[str], Depends(authorization_header)],
) -> Optional[Principal]:
    """Authenticated caller, ``None`` when no credential was sent, 401 for a bad one."""
    return _remember(optional_auth.extract(authorization))


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
OptionalPrincipal = Annotated[Optional[Principal], Depends(get_optional_principal)]


def get_request_id(request: Request) -> Optional[str]:
    """Get request correlation ID (set by RequestIdMiddleware)."""
    return getattr(request.state, "request_id", None)
