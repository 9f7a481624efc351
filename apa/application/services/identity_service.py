"""Role / identity gate: users/{uid} profiles and role resolution."""

from __future__ import annotations

import logging
from typing import Any

from apa.application.dtos.identity import Actor, AuthIdentity
from apa.application.dtos.record import RecordResult
from apa.application.interfaces.repositories import IRecordRepository
from apa.application.services.record_service import require_actor, require_admin
from apa.domain.enums import UserRole
from apa.domain.exceptions import RecordAlreadyExistsException, ResourceNotFoundException
from apa.schemas.common import parse_payload
from apa.schemas.users import ProfileUpdate

logger = logging.getLogger(__name__)

# Optional profile fields created blank on first sign-in.
_BLANK_PROFILE_FIELDS = (
    "phone",
    "address",
    "dwellingType",
    "hasOtherPets",
    "petDetails",
    "householdCount",
    "spaceDescription",
    "availability",
)


def _role_of(record: RecordResult) -> UserRole:
    raw = record.get("role", UserRole.USER.value)
    try:
        return UserRole(raw)
    except ValueError:
        logger.warning("Unknown role %r on users/%s; treating as user", raw, record.id)
        return UserRole.USER


class IdentityService:
    """Resolves verified identities to actors, provisioning profiles on first sign-in."""

    def __init__(self, users_repo: IRecordRepository) -> None:
        self._repo = users_repo

    @staticmethod
    def _actor(record: RecordResult) -> Actor:
        return Actor(
            uid=record.id,
            role=_role_of(record),
            email=record.get("email") or "",
            display_name=record.get("displayName") or "",
            phone=record.get("phone") or "",
        )

    async def ensure_profile(self, identity: AuthIdentity) -> RecordResult:
        """Return users/{uid}, creating it with role user on first sign-in.

        Keyed by uid with a create-if-absent write, so concurrent first
        requests converge on one profile.
        """
        record = await self._repo.get(identity.uid)
        if record is not None:
            return record
        profile: dict[str, Any] = {
            "uid": identity.uid,
            "email": identity.email,
            "displayName": identity.display_name,
            "role": UserRole.USER.value,
        }
        profile.update({name: "" for name in _BLANK_PROFILE_FIELDS})
        try:
            record = await self._repo.create(identity.uid, profile)
            logger.info("Provisioned profile users/%s", identity.uid)
            return record
        except RecordAlreadyExistsException:
            existing = await self._repo.get(identity.uid)
            if existing is None:
                raise ResourceNotFoundException("user", identity.uid) from None
            return existing

    async def resolve(self, identity: AuthIdentity) -> Actor:
        return self._actor(await self.ensure_profile(identity))

    async def get_profile(self, actor: Actor | None) -> RecordResult:
        actor = require_actor(actor)
        record = await self._repo.get(actor.uid)
        if record is None:
            raise ResourceNotFoundException("user", actor.uid)
        return record

    async def update_profile(self, actor: Actor | None, payload: Any) -> RecordResult:
        """Update the caller's own profile; role is not an accepted field."""
        actor = require_actor(actor)
        model = parse_payload(ProfileUpdate, payload)
        fields = model.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        if not fields:
            return await self.get_profile(actor)
        return await self._repo.update(actor.uid, fields)

    async def set_role(self, uid: str, role: UserRole, actor: Actor | None = None) -> RecordResult:
        """Change a user's role. With an actor, that actor must be an admin (scripts pass none)."""
        if actor is not None:
            require_admin(actor, "set_role", "user")
        record = await self._repo.update(uid, {"role": UserRole(role).value})
        logger.info("users/%s role set to %s", uid, role)
        return record
