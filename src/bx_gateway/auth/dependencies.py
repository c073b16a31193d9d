"""FastAPI dependencies: get_current_actor, require_admin.

Usage in any protected router:
    from src.bx_gateway.auth.dependencies import get_current_actor

    @router.get("/protected")
    async def protected(actor: Actor = Depends(get_current_actor)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.bx_common.actor import Actor
from src.bx_common.errors import ForbiddenError, InvalidCredentialsError
from src.bx_gateway.auth.jwt_handler import actor_from_token

# tokenUrl points at the identity provider's token endpoint (Swagger "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_actor(token: str = Depends(oauth2_scheme)) -> Actor:
    """Extract and validate the JWT Bearer token, return the Actor.

    The identity is trusted as given; no user lookup happens here.
    Raises HTTP 401 if the token is missing, invalid, or expired.
    """
    try:
        return actor_from_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None


async def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    """Verify the caller holds the admin role (HTTP 403 otherwise)."""
    if not actor.is_admin:
        raise ForbiddenError("use admin endpoints")
    return actor
