"""
Pydantic schemas for authentication endpoints.
"""
from pydantic import BaseModel

class SignUpIn(BaseModel):
    """
    Request model for email/password sign-up.
    """
    email: str
    password: str
    displayName: str

class SignInIn(BaseModel):
    """
    Request model for email/password sign-in.
    """
    email: str
    password: str

class OAuthSignInIn(BaseModel):
    """
    Request model for OAuth popup sign-in.
    The client completes the provider popup and forwards the access token.
    """
    accessToken: str
