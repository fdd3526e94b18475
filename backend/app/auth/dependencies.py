"""Authentication and authorization dependencies for FastAPI.

``get_current_user`` verifies the Supabase session JWT sent by the SPA;
``require_admin`` additionally asks the database whether that user holds
the ``admin`` role.
"""

import logging

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)

security = HTTPBearer()

JWT_AUDIENCE = "authenticated"
ADMIN_ROLE = "admin"

# Supabase signing keys, fetched once per process
_jwks_cache: dict | None = None


async def _load_jwks(supabase_url: str) -> dict:
    global _jwks_cache
    if _jwks_cache is None:
        async with httpx.AsyncClient() as client:
            response = await client.get(f"{supabase_url}/auth/v1/.well-known/jwks.json")
            response.raise_for_status()
            _jwks_cache = response.json()
    return _jwks_cache


def reset_jwks_cache() -> None:
    """Reset cached JWKS for testing."""
    global _jwks_cache
    _jwks_cache = None


async def _decode_token(token: str, settings: Settings) -> dict:
    """Verify *token* and return its claims.

    ES256 tokens are checked against the project's JWKS; anything else is
    treated as a legacy HS256 token signed with the JWT secret.
    """
    header = jwt.get_unverified_header(token)

    if header.get("alg") == "ES256":
        jwks = await _load_jwks(settings.supabase_url)
        key = next(
            (k for k in jwks.get("keys", []) if k.get("kid") == header.get("kid")),
            None,
        )
        if key is None:
            raise JWTError("No JWKS key matches the token kid")
        return jwt.decode(token, key, algorithms=["ES256"], audience=JWT_AUDIENCE)

    return jwt.decode(
        token,
        settings.supabase_jwt_secret or settings.supabase_key,
        algorithms=["HS256"],
        audience=JWT_AUDIENCE,
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> dict:
    """
    Resolve the caller from the ``Authorization: Bearer`` header.

    Returns:
        Dict with user_id, email and role taken from the token claims

    Raises:
        HTTPException: 401 for an invalid or expired token, 503 if the
            signing keys cannot be fetched
    """
    try:
        claims = await _decode_token(credentials.credentials, get_settings())
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except httpx.HTTPError as e:
        logger.error(f"JWKS fetch failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service unavailable",
        )

    return {
        "user_id": claims.get("sub"),
        "email": claims.get("email"),
        "role": claims.get("role"),
    }


async def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    """Allow the request only if the ``has_role`` RPC confirms the admin role."""
    from app.db.supabase import get_async_supabase_client_async

    supabase = await get_async_supabase_client_async()
    result = await supabase.rpc(
        "has_role", {"_user_id": current_user["user_id"], "_role": ADMIN_ROLE}
    ).execute()
    if not result.data:
        logger.warning(f"User {current_user['user_id']} denied admin access")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required"
        )
    return current_user
