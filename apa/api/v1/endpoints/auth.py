"""Auth API: email/password and Google sign-in through the identity provider.

Both return the provider's ID token, which is then sent as the bearer token.
The caller's profile (users/{uid}) is provisioned on the first sign-in.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from apa.api.v1.dependencies import get_auth_provider, get_identity_service
from apa.application.dtos.identity import AuthIdentity, SignInResult
from apa.application.interfaces.services import IAuthProvider
from apa.application.services.identity_service import IdentityService
from apa.core.limiter import limit_auth
from apa.schemas.auth import GoogleSignInRequest, LoginRequest, TokenResponse

router = APIRouter()


async def _token_response(result: SignInResult, identity: IdentityService) -> TokenResponse:
    await identity.ensure_profile(AuthIdentity(uid=result.uid, email=result.email))
    return TokenResponse(
        access_token=result.id_token,
        expires_in=result.expires_in,
        refresh_token=result.refresh_token,
        uid=result.uid,
        email=result.email,
    )


@router.post("/login", response_model=TokenResponse)
@limit_auth
async def login(
    request: Request,
    body: LoginRequest,
    provider: Annotated[IAuthProvider, Depends(get_auth_provider)],
    identity: Annotated[IdentityService, Depends(get_identity_service)],
):
    """Sign in with email and password; return the ID token."""
    result = await provider.sign_in_with_password(body.email, body.password)
    return await _token_response(result, identity)


@router.post("/google", response_model=TokenResponse)
@limit_auth
async def google_sign_in(
    request: Request,
    body: GoogleSignInRequest,
    provider: Annotated[IAuthProvider, Depends(get_auth_provider)],
    identity: Annotated[IdentityService, Depends(get_identity_service)],
):
    """Exchange a Google ID token for a Firebase session."""
    result = await provider.sign_in_with_google(body.id_token, body.request_uri)
    return await _token_response(result, identity)
