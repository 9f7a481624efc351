"""News posts and partners (admin CRUD, public lists)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from apa.application.dtos.identity import Actor
from apa.application.dtos.record import ASCENDING, DESCENDING, RecordQuery, RecordResult
from apa.application.interfaces.repositories import IRecordRepository
from apa.application.services.record_service import RecordKind, RecordService, require_admin
from apa.infrastructure.firebase.collections import COLLECTION_PARTNERS, COLLECTION_POSTS
from apa.schemas.content import PartnerCreate, PartnerUpdate, PostCreate, PostUpdate
from apa.shared.utils.datetime import ensure_utc, utc_now

EXCERPT_LENGTH = 100

POST = RecordKind(
    name="post",
    collection=COLLECTION_POSTS,
    create_schema=PostCreate,
    update_schema=PostUpdate,
    owner_field=None,
    admin_only_create=True,
    default_order=(("publishDate", DESCENDING),),
)

PARTNER = RecordKind(
    name="partner",
    collection=COLLECTION_PARTNERS,
    create_schema=PartnerCreate,
    update_schema=PartnerUpdate,
    owner_field=None,
    admin_only_create=True,
    default_order=(("order", ASCENDING),),
)


def make_excerpt(content: str, length: int = EXCERPT_LENGTH) -> str:
    """First length characters followed by '...'."""
    return f"{content[:length]}..."


class PostService(RecordService):
    def __init__(self, repo: IRecordRepository) -> None:
        super().__init__(POST, repo)

    async def _prepare(self, model: BaseModel, actor: Actor) -> dict[str, Any]:
        data = self._dump(model, exclude={"publishDate"})
        if not data.get("excerpt"):
            data["excerpt"] = make_excerpt(data["content"])
        data["publishDate"] = ensure_utc(model.publishDate) or utc_now()
        return data

    def _update_fields(self, model: BaseModel) -> dict[str, Any]:
        fields = self._dump(model, exclude_unset=True, exclude={"publishDate"})
        if model.publishDate is not None:
            fields["publishDate"] = ensure_utc(model.publishDate)
        return fields

    def public_query(self) -> RecordQuery:
        return RecordQuery().where("isActive", "==", True).ordered("publishDate", DESCENDING)

    async def list_public(self, category: str | None = None) -> list[RecordResult]:
        records = await self._repo.query(self.public_query())
        if category:
            records = [r for r in records if r.get("category") == category]
        return records

    async def list_highlighted(self) -> list[RecordResult]:
        return [r for r in await self.list_public() if r.get("isHighlighted")]

    async def list_for_admin(self, actor: Actor | None) -> list[RecordResult]:
        require_admin(actor, "list", self.kind.name)
        return await self.list()


class PartnerService(RecordService):
    def __init__(self, repo: IRecordRepository) -> None:
        super().__init__(PARTNER, repo)

    def public_query(self) -> RecordQuery:
        return RecordQuery().where("isActive", "==", True).ordered("order", ASCENDING)

    async def list_public(self) -> list[RecordResult]:
        return await self._repo.query(self.public_query())

    async def list_for_admin(self, actor: Actor | None) -> list[RecordResult]:
        require_admin(actor, "list", self.kind.name)
        return await self.list()
