"""Bearer JWT authentication for FastAPI.

Tokens are issued by the external auth service and signed with the shared
``jwt_secret``. Claims used here: ``sub`` (user id) and ``role``.
"""

import jwt as pyjwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import get_settings
from app.domain.permissions import Role, UserAuthority

_bearer_scheme = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> UserAuthority:
    """Verify and decode an access token.

    Raises ``HTTPException(401)`` on any validation failure.
    """
    settings = get_settings()
    try:
        payload = pyjwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={
                "verify_exp": True,
                "require": ["sub", "exp"],
            },
        )
    except pyjwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except pyjwt.MissingRequiredClaimError as exc:
        raise HTTPException(status_code=401, detail=f"Missing required claim: {exc}")
    except pyjwt.InvalidTokenError as exc:
        raise HTTPException(status_code=401, detail=f"Invalid token: {exc}")

    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="Token missing sub claim")

    try:
        role = Role(str(payload.get("role", Role.USER.value)).lower())
    except ValueError:
        raise HTTPException(status_code=401, detail="Token carries an unknown role")

    return UserAuthority(user_id=sub, role=role)


async def require_auth(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> UserAuthority:
    """FastAPI dependency that extracts and validates the bearer token.

    Usage::

        @router.get("/protected")
        async def protected(actor: UserAuthority = Depends(require_auth)):
            ...
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    actor = decode_access_token(credentials.credentials)

    # Set user_id on request state for downstream use (error handlers, audit logging)
    request.state.user_id = actor.user_id

    return actor


async def require_admin(actor: UserAuthority = Depends(require_auth)) -> UserAuthority:
    """FastAPI dependency that requires the ADMIN role."""
    if not actor.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return actor
