"""Auth API schemas."""

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class GoogleSignInRequest(BaseModel):
    """Google ID token obtained by the browser; exchanged for a Firebase session."""

    id_token: str = Field(..., min_length=10)
    request_uri: str = "http://localhost"


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    refresh_token: str = ""
    uid: str
    email: str = ""
