"""FastAPI dependency: the authenticated actor behind an offers request.

This service has no login route; Bearer tokens come from the identity service,
so the scheme is plain HTTP Bearer. Every failure (missing header, bad
signature, expired, wrong token type, empty subject) is the same 401.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.om_common.errors import InvalidCredentialsError
from src.om_gateway.auth.jwt_handler import decode_token

# auto_error=False so a missing header gets our 401, not Starlette's default
bearer_scheme = HTTPBearer(auto_error=False, description="Access token from the identity service")


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    """Return the token's ``sub`` claim: the buyer or seller acting on an offer."""
    if credentials is None:
        raise _unauthorized()
    try:
        payload = decode_token(credentials.credentials)
    except InvalidCredentialsError:
        raise _unauthorized() from None

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized()
    return user_id
