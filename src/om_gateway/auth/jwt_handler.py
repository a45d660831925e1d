"""JWT verification for tokens issued by the identity service.

The identity service owns users, passwords and token issuance. This service
verifies the shared-secret signature and trusts ``sub`` as the actor ID that
the negotiation engine checks against an offer's buyer_id / seller_id.

``create_access_token`` exists for tests and local tooling; production
tokens never originate here.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from config.settings import settings
from src.om_common.errors import InvalidCredentialsError

ACCESS_TOKEN_TYPE = "access"

_DECODE_OPTIONS = {
    "require_exp": True,
    "require_sub": True,
    "leeway": settings.JWT_LEEWAY_SECONDS,
}


def create_access_token(user_id: str, expires_in: timedelta = timedelta(minutes=30)) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": now + expires_in,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM))


def decode_token(token: str) -> dict[str, Any]:
    """Verify signature, expiry and token type; return the claims.

    Raises:
        InvalidCredentialsError: on any verification failure; callers see one
            error regardless of cause.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],  # pinned: no alg=none, no alg swap
            options=_DECODE_OPTIONS,
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise InvalidCredentialsError()
    return payload
