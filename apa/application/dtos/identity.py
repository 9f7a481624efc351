"""Identity DTOs: verified token identity and the resolved actor."""

from __future__ import annotations

from dataclasses import dataclass

from apa.domain.enums import UserRole


@dataclass(frozen=True)
class AuthIdentity:
    """Identity asserted by a verified token (before the profile lookup)."""

    uid: str
    email: str = ""
    display_name: str = ""


@dataclass(frozen=True)
class Actor:
    """Caller of a service operation: uid, role and the profile fields leads reuse."""

    uid: str
    role: UserRole = UserRole.USER
    email: str = ""
    display_name: str = ""
    phone: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


@dataclass(frozen=True)
class SignInResult:
    """Tokens returned by the auth provider after a successful sign-in."""

    id_token: str
    uid: str
    email: str
    refresh_token: str = ""
    expires_in: int = 3600
