from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError as PydanticValidationError

from .auth.capabilities import Capabilities
from .auth.policy_table import DEFAULT_POLICY, PolicyTable
from .auth.session import AccessContext
from .errors import AuthError
from .schemas.session import SessionUser
from .security.token_inspection import ExpiredTokenError, InvalidTokenError, validate_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_policy() -> PolicyTable:
    return DEFAULT_POLICY


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> SessionUser:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError(details="Not authenticated")

    try:
        payload = validate_access_token(credentials.credentials)
    except ExpiredTokenError:
        raise AuthError(details="Token has expired") from None
    except InvalidTokenError:
        raise AuthError(details="Invalid token") from None

    try:
        return SessionUser.model_validate(payload["user"])
    except PydanticValidationError:
        raise AuthError(details="Invalid token payload") from None


async def get_access_context(
    user: SessionUser = Depends(get_current_user),
    policy: PolicyTable = Depends(get_policy),
) -> AccessContext:
    return AccessContext.from_user(user, policy)


async def get_capabilities(
    context: AccessContext = Depends(get_access_context),
) -> Capabilities:
    return Capabilities(context)
