"""JWT access token verification.

Tokens are issued by the external identity provider, signed HS256 with the
shared JWT_SECRET. Claims this service relies on:
  - sub:  user id
  - role: buyer | seller | admin
  - type: "access"

create_access_token() exists for local tooling and tests; production tokens
never originate here.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.bx_common.actor import Actor
from src.bx_common.enums import ActorRole
from src.bx_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


def create_access_token(user_id: str, role: ActorRole) -> str:
    """Issue a short-lived access token (default: 30 min)."""
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "role": role.value,
        "type": "access",
        "iat": now,
        "exp": now + _ACCESS_EXPIRE,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> dict[str, str]:
    """Decode and validate an access token.

    Raises:
        InvalidCredentialsError: signature/expiry invalid or wrong token type.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access":
        raise InvalidCredentialsError()
    return payload


def actor_from_token(token: str) -> Actor:
    """Decode a token into the Actor it authenticates."""
    payload = decode_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise InvalidCredentialsError()
    try:
        role = ActorRole(payload.get("role", ""))
    except ValueError:
        raise InvalidCredentialsError() from None
    return Actor(user_id=str(user_id), role=role)
