"""Firebase Authentication over REST (no firebase-admin).

ID tokens are verified with google-auth against Google's public certificates
(the call blocks, so it runs in a thread). Email/password and Google sign-in
go through the Identity Toolkit REST API with httpx.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from apa.application.dtos.identity import AuthIdentity, SignInResult
from apa.domain.exceptions import AuthenticationException, TransientIOException
from apa.infrastructure.exceptions import AuthProviderError

logger = logging.getLogger(__name__)

_IDENTITY_TOOLKIT = "https://identitytoolkit.googleapis.com/v1"

# Identity Toolkit error messages that mean "bad credentials" rather than a provider fault.
_CREDENTIAL_ERRORS = frozenset({
    "EMAIL_NOT_FOUND",
    "INVALID_PASSWORD",
    "INVALID_LOGIN_CREDENTIALS",
    "INVALID_EMAIL",
    "USER_DISABLED",
    "INVALID_IDP_RESPONSE",
    "MISSING_PASSWORD",
})


def _verify_firebase_token(token: str, project_id: str) -> dict:
    from google.auth.transport.requests import Request
    from google.oauth2 import id_token

    return id_token.verify_firebase_token(token, Request(), audience=project_id)


class FirebaseTokenVerifier:
    """ITokenVerifier for Firebase ID tokens."""

    def __init__(self, project_id: str) -> None:
        self._project_id = project_id

    async def verify(self, token: str) -> AuthIdentity:
        try:
            claims = await asyncio.to_thread(_verify_firebase_token, token, self._project_id)
        except ValueError as e:
            raise AuthenticationException("Invalid or expired token") from e
        uid = claims.get("user_id") or claims.get("sub")
        if not uid:
            raise AuthenticationException("Token missing subject")
        return AuthIdentity(
            uid=uid,
            email=claims.get("email", ""),
            display_name=claims.get("name", ""),
        )


class FirebaseAuthClient:
    """IAuthProvider over the Identity Toolkit REST API."""

    def __init__(self, http_client: httpx.AsyncClient, api_key: str) -> None:
        self._http = http_client
        self._api_key = api_key

    async def _post(self, operation: str, endpoint: str, body: dict) -> dict:
        try:
            resp = await self._http.post(
                f"{_IDENTITY_TOOLKIT}/accounts:{endpoint}",
                params={"key": self._api_key},
                json=body,
            )
        except httpx.TransportError as e:
            logger.warning("Identity Toolkit %s transport error: %s", operation, e)
            raise TransientIOException(operation=operation) from e
        if resp.status_code == 200:
            return resp.json()
        try:
            message = resp.json().get("error", {}).get("message", "")
        except ValueError:
            message = ""
        code = message.split(" ")[0].split(":")[0]
        if code in _CREDENTIAL_ERRORS:
            raise AuthenticationException("Invalid credentials")
        if resp.status_code >= 500 or code == "TOO_MANY_ATTEMPTS_TRY_LATER":
            raise TransientIOException(operation=operation)
        logger.error("Identity Toolkit %s failed (%s): %s", operation, resp.status_code, message)
        raise AuthProviderError(operation, message or str(resp.status_code))

    @staticmethod
    def _result(data: dict) -> SignInResult:
        return SignInResult(
            id_token=data["idToken"],
            uid=data["localId"],
            email=data.get("email", ""),
            refresh_token=data.get("refreshToken", ""),
            expires_in=int(data.get("expiresIn", 3600)),
        )

    async def sign_in_with_password(self, email: str, password: str) -> SignInResult:
        data = await self._post(
            "sign_in_with_password",
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._result(data)

    async def sign_in_with_google(self, google_id_token: str, request_uri: str) -> SignInResult:
        data = await self._post(
            "sign_in_with_google",
            "signInWithIdp",
            {
                "postBody": f"id_token={google_id_token}&providerId=google.com",
                "requestUri": request_uri,
                "returnSecureToken": True,
                "returnIdpCredential": True,
            },
        )
        return self._result(data)
