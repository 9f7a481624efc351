"""Local HS256 tokens (auth_backend=local) for development and tests.

A local token carries the same claims the services read from a Firebase ID
token: sub (uid), email and name. Secret, algorithm and lifetime come from
Settings.
"""

from datetime import timedelta

from jose import ExpiredSignatureError, JWTError, jwt

from apa.application.dtos.identity import AuthIdentity
from apa.core.config import get_settings
from apa.domain.exceptions import AuthenticationException
from apa.shared.utils.datetime import utc_now


def issue_local_token(
    uid: str,
    email: str = "",
    name: str = "",
    ttl: timedelta | None = None,
) -> str:
    """Sign a token for uid; ttl defaults to access_token_expire_minutes."""
    settings = get_settings()
    lifetime = ttl if ttl is not None else timedelta(minutes=settings.access_token_expire_minutes)
    issued_at = utc_now()
    claims = {
        "sub": uid,
        "email": email,
        "name": name,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.secret_key.get_secret_value(), algorithm=settings.algorithm)


class LocalTokenVerifier:
    """ITokenVerifier for tokens from issue_local_token."""

    async def verify(self, token: str) -> AuthIdentity:
        settings = get_settings()
        try:
            claims = jwt.decode(
                token,
                settings.secret_key.get_secret_value(),
                algorithms=[settings.algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError as e:
            raise AuthenticationException("Token expired") from e
        except JWTError as e:
            raise AuthenticationException("Invalid or expired token") from e
        return AuthIdentity(
            uid=claims["sub"],
            email=claims.get("email") or "",
            display_name=claims.get("name") or "",
        )
