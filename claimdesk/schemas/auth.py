"""
Authentication Schemas
Pydantic models for authentication endpoints
Source: https://fastapi.tiangolo.com/tutorial/security/oauth2-jwt/
"""

from pydantic import BaseModel


class Token(BaseModel):
    """
    JWT token response.

    Source: https://datatracker.ietf.org/doc/html/rfc6749#section-5.1
    """

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    """Login credentials. ``login`` accepts a username or an email address."""

    login: str
    password: str


class RefreshTokenRequest(BaseModel):
    """Refresh token request"""

    refresh_token: str
