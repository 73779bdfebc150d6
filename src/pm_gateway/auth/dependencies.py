"""FastAPI dependencies: get_current_account, require_owner.

Usage in any protected router:
    from src.pm_gateway.auth.dependencies import get_current_account

    @router.post("/protected")
    async def protected(caller: Annotated[str, Depends(get_current_account)]):
        ...
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config.settings import settings
from src.pm_common.errors import InvalidCredentialsError, UnauthorizedError
from src.pm_gateway.auth.jwt_handler import decode_token
from src.pm_registry.domain.registry import is_internal_account

# Tokens are minted out of band, so there is no token endpoint to advertise
bearer_scheme = HTTPBearer(auto_error=False)

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    if credentials is None:
        raise _CREDENTIALS_EXCEPTION
    return credentials.credentials


async def get_current_account(token: Annotated[str, Depends(bearer_token)]) -> str:
    """Validate the Bearer token and return the caller's account id.

    Raises HTTP 401 if the token is missing, invalid, or expired, and
    UnauthorizedError (403) if the subject names an internal custody account
    (a market escrow or the registry).
    """
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    account_id = payload.get("sub")
    if not account_id:
        raise _CREDENTIALS_EXCEPTION
    if is_internal_account(account_id):
        raise UnauthorizedError(account_id, "act as an internal custody account")
    return account_id


async def require_owner(caller: Annotated[str, Depends(get_current_account)]) -> str:
    """Verify the caller is the registry owner (HTTP 403 otherwise)."""
    if caller != settings.OWNER_ACCOUNT_ID:
        raise UnauthorizedError(caller, "perform owner actions")
    return caller
