"""
Identity Provider

Email/password accounts plus OAuth popup sign-in. Every path ends in a User
row whose identity() is what clients see: {id, displayName, email, avatarUrl}.
New accounts start with the full daily credit allowance.
"""
import logging
from typing import Dict

import httpx

from ..config import settings
from ..core.errors import AppError, AuthError, ValidationError
from ..core.security import hash_password, verify_password
from ..models.user import User
from .credits import DAILY_ALLOWANCE, today

logger = logging.getLogger("uvicorn.error")

MIN_PASSWORD_LENGTH = 6


class EmailExists(AppError):
    code = "EMAIL_EXISTS"
    status_code = 409
    message = "Email already registered"


def oauth_userinfo_urls() -> Dict[str, str]:
    """Supported OAuth providers -> userinfo endpoint"""
    return {"google": settings.google_userinfo_url}


def _normalize_email(email: str) -> str:
    email = (email or "").strip().lower()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("A valid email address is required.")
    return email


async def _create_account(email: str, display_name: str, **fields) -> User:
    user = await User.create(
        email=email,
        display_name=(display_name or "").strip() or "Anonymous",
        credits=DAILY_ALLOWANCE,
        credits_last_reset=today(),
        **fields,
    )
    logger.info("[identity] created account id=%s provider=%s", user.id, user.auth_provider)
    return user


async def sign_up(email: str, password: str, display_name: str) -> User:
    email = _normalize_email(email)
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if await User.exists(email=email):
        raise EmailExists()
    return await _create_account(
        email,
        display_name,
        password_hash=hash_password(password),
        auth_provider="password",
    )


async def sign_in(email: str, password: str) -> User:
    user = await User.get_or_none(email=(email or "").strip().lower())
    if not user or not verify_password(password, user.password_hash):
        raise AuthError()
    return user


async def fetch_oauth_profile(provider: str, access_token: str) -> dict:
    """
    Ask the provider who owns `access_token`.

    Returns the raw userinfo document (OpenID Connect claims: sub, email,
    name, picture).
    """
    url = oauth_userinfo_urls().get(provider)
    if url is None:
        raise ValidationError(f"Unsupported sign-in provider: {provider}")
    try:
        async with httpx.AsyncClient(timeout=15) as client:
            resp = await client.get(url, headers={"Authorization": f"Bearer {access_token}"})
            resp.raise_for_status()
            return resp.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("[identity] %s userinfo failed: %r", provider, e)
        raise AuthError("Sign-in with the provider failed.", provider=provider)


async def sign_in_with_oauth(provider: str, access_token: str) -> User:
    """
    Popup sign-in: resolve the provider profile, then find or create the
    account by email. Profile name and picture are refreshed on every sign-in.
    """
    profile = await fetch_oauth_profile(provider, access_token)
    if not profile.get("email"):
        raise AuthError("The provider did not share an email address.", provider=provider)
    email = _normalize_email(profile["email"])
    display_name = profile.get("name") or email.split("@")[0]
    avatar_url = profile.get("picture")

    user = await User.get_or_none(email=email)
    if user is None:
        return await _create_account(email, display_name, avatar_url=avatar_url, auth_provider=provider)

    user.display_name = display_name
    user.avatar_url = avatar_url or user.avatar_url
    await user.save(update_fields=["display_name", "avatar_url"])
    return user
