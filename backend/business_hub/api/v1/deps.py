from fastapi import Depends, Header, HTTPException, Request, status
from starlette.websockets import WebSocket
from business_hub.core.security import decode_access_token
from business_hub.models.user import User

async def user_from_token(token: str | None) -> User | None:
    """
    Resolve a JWT access token to its user, or None when the token is
    missing, invalid, expired or points at a deleted account.
    """
    if not token:
        return None
    try:
        payload = decode_access_token(token)
        user_id: str = payload.get("sub")
    except Exception:
        return None
    return await User.get_or_none(id=user_id)

async def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
):
    """
    FastAPI dependency to get the current authenticated user.

    The JWT is read from:
    1. Authorization header (Bearer token) - preferred
    2. HttpOnly cookie (accessToken) - fallback

    Raises:
        HTTPException (401): AUTH_REQUIRED, AUTH_INVALID_TOKEN
    """
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    if not token:
        token = request.cookies.get("accessToken")

    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_REQUIRED")

    user = await user_from_token(token)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="AUTH_INVALID_TOKEN")
    return user

async def websocket_user(ws: WebSocket) -> User | None:
    """
    Authenticate a WebSocket from its `token` query parameter or the
    accessToken cookie (browsers cannot set headers on WebSocket upgrades).
    """
    token = ws.query_params.get("token") or ws.cookies.get("accessToken")
    return await user_from_token(token)

async def require_admin(current: User = Depends(get_current_user)) -> User:
    """
    FastAPI dependency to ensure the current user is an administrator.

    Raises:
        HTTPException (403): FORBIDDEN_ADMIN_ONLY
    """
    if getattr(current, "role", "user") != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="FORBIDDEN_ADMIN_ONLY")
    return current
