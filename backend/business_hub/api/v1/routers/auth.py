# business_hub/api/v1/routers/auth.py
from fastapi import APIRouter, Depends, Response
from business_hub.api.v1.deps import get_current_user
from business_hub.core.security import create_access_token
from business_hub.models.user import User
from business_hub.schemas.auth import OAuthSignInIn, SignInIn, SignUpIn
from business_hub.services import identity

router = APIRouter(prefix="/auth", tags=["auth"])

def _session_response(user: User, response: Response) -> dict:
    """Issue a token for `user`, set it as HttpOnly cookie and return identity + token."""
    token = create_access_token(str(user.id), user.role)
    response.set_cookie("accessToken", token, httponly=True, secure=False, samesite="lax")
    return {"success": True, "data": {"user": user.identity(), "accessToken": token}}

@router.post("/signup")
async def sign_up(body: SignUpIn, response: Response):
    """
    Create an email/password account and sign it in.

    The account starts with the full daily credit allowance.

    Error codes:
        - VALIDATION_ERROR: malformed email or short password
        - EMAIL_EXISTS: email already registered
    """
    user = await identity.sign_up(body.email, body.password, body.displayName)
    return _session_response(user, response)

@router.post("/signin")
async def sign_in(body: SignInIn, response: Response):
    """
    Authenticate with email and password.

    The access token is returned in the body and also set as an HttpOnly
    cookie named "accessToken".

    Error codes:
        - AUTH_INVALID_CREDENTIALS
    """
    user = await identity.sign_in(body.email, body.password)
    return _session_response(user, response)

@router.post("/oauth/{provider}")
async def sign_in_with_oauth(provider: str, body: OAuthSignInIn, response: Response):
    """
    Sign in with an OAuth provider's access token obtained from a popup flow.
    Creates the account on first sign-in.
    """
    user = await identity.sign_in_with_oauth(provider, body.accessToken)
    return _session_response(user, response)

@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return {"success": True, "data": {**user.identity(), "role": user.role}}

@router.post("/signout")
async def sign_out(response: Response):
    """
    Clear the access token cookie. The JWT itself stays valid until it expires.
    """
    response.delete_cookie("accessToken")
    return {"success": True}
