"""External service interfaces (auth provider, token verification, image hosting)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from apa.application.dtos.identity import AuthIdentity, SignInResult


class ITokenVerifier(Protocol):
    """Verifies a bearer token and returns the identity it asserts."""

    async def verify(self, token: str) -> AuthIdentity:
        """Raise AuthenticationException when the token is invalid or expired."""


class IAuthProvider(Protocol):
    """Email/password and Google sign-in against the identity provider."""

    async def sign_in_with_password(self, email: str, password: str) -> SignInResult:
        """Return provider tokens; raise AuthenticationException on bad credentials."""

    async def sign_in_with_google(self, google_id_token: str, request_uri: str) -> SignInResult:
        """Exchange a Google ID token for provider tokens."""


class IImageUploader(Protocol):
    """Uploads an image and returns its durable public URL."""

    async def upload(self, filename: str, content: bytes, content_type: str) -> str:
        """Return the https URL of the stored image."""
