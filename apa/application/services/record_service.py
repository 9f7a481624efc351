"""Generic record services.

RecordService covers validated create, admin edit, delete and listing for one
collection. WorkflowRecordService adds status transitions driven by the
Workflow tables in apa.domain.workflows. Entity services subclass these and
override the _prepare / _before_create hooks.

Authorization is enforced here for every write; endpoints only resolve the
actor.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from apa.application.dtos.identity import Actor
from apa.application.dtos.record import DESCENDING, RecordQuery, RecordResult
from apa.application.events import TransitionCompleted, TransitionEventBus
from apa.application.interfaces.repositories import IRecordRepository
from apa.domain.exceptions import (
    AuthenticationException,
    ResourceNotFoundException,
    UnauthorizedException,
    ValidationException,
)
from apa.domain.workflow import Workflow
from apa.schemas.common import parse_payload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordKind:
    """Static description of an entity kind.

    Attributes:
        name: Entity name used in errors and logs (e.g. 'adoption_lead').
        collection: Store collection.
        create_schema: Payload model for create.
        update_schema: Payload model for admin edits (None: not editable).
        workflows: Workflow per status field.
        owner_field: Field set to the creator's uid (None: not stored).
        admin_only_create: Only admins may create.
        default_order: Ordering used by list().
    """

    name: str
    collection: str
    create_schema: type[BaseModel]
    update_schema: type[BaseModel] | None = None
    workflows: Mapping[str, Workflow] = field(default_factory=dict)
    owner_field: str | None = "userId"
    admin_only_create: bool = False
    default_order: tuple[tuple[str, str], ...] = (("createdAt", DESCENDING),)


def require_actor(actor: Actor | None) -> Actor:
    if actor is None:
        raise AuthenticationException()
    return actor


def require_admin(actor: Actor | None, action: str, resource: str) -> Actor:
    actor = require_actor(actor)
    if not actor.is_admin:
        raise UnauthorizedException(action=action, resource=resource)
    return actor


class RecordService:
    """Create / edit / delete / list for one collection."""

    def __init__(
        self,
        kind: RecordKind,
        repo: IRecordRepository,
        events: TransitionEventBus | None = None,
    ) -> None:
        self.kind = kind
        self._repo = repo
        self._events = events

    @property
    def repo(self) -> IRecordRepository:
        return self._repo

    def _dump(self, model: BaseModel, **kwargs: Any) -> dict[str, Any]:
        """Store representation of a validated payload (enum values, ISO dates)."""
        return model.model_dump(mode="json", exclude_none=True, **kwargs)

    async def _prepare(self, model: BaseModel, actor: Actor) -> dict[str, Any]:
        """Build the document fields from a validated create payload."""
        return self._dump(model)

    async def _before_create(self, data: dict[str, Any], actor: Actor) -> None:
        """Last check before the write (e.g. duplicate detection)."""

    async def get(self, record_id: str) -> RecordResult:
        record = await self._repo.get(record_id)
        if record is None:
            raise ResourceNotFoundException(self.kind.name, record_id)
        return record

    async def list(self, query: RecordQuery | None = None) -> list[RecordResult]:
        return await self._repo.query(query or RecordQuery(order_by=self.kind.default_order))

    async def create(self, payload: Any, actor: Actor | None) -> RecordResult:
        """Validate and store a new record; workflow fields are forced to their initial status."""
        actor = require_actor(actor)
        if self.kind.admin_only_create:
            require_admin(actor, "create", self.kind.name)
        model = parse_payload(self.kind.create_schema, payload)
        data = await self._prepare(model, actor)
        for status_field, workflow in self.kind.workflows.items():
            data[status_field] = workflow.initial_for(actor.role, requested=data.get(status_field))
        if self.kind.owner_field:
            data[self.kind.owner_field] = actor.uid
        await self._before_create(data, actor)
        record = await self._repo.add(data)
        logger.info("Created %s %s by %s", self.kind.name, record.id, actor.uid)
        return record

    def _update_fields(self, model: BaseModel) -> dict[str, Any]:
        return self._dump(model, exclude_unset=True)

    async def update(self, record_id: str, payload: Any, actor: Actor | None) -> RecordResult:
        """Admin edit of non-status fields."""
        require_admin(actor, "update", self.kind.name)
        if self.kind.update_schema is None:
            raise ValidationException(f"{self.kind.name} cannot be edited")
        model = parse_payload(self.kind.update_schema, payload)
        fields = self._update_fields(model)
        if not fields:
            raise ValidationException("No fields to update")
        await self.get(record_id)
        return await self._repo.update(record_id, fields)

    async def delete(self, record_id: str, actor: Actor | None) -> None:
        """Physical delete (no soft delete)."""
        actor = require_admin(actor, "delete", self.kind.name)
        await self.get(record_id)
        await self._repo.delete(record_id)
        logger.info("Deleted %s %s by %s", self.kind.name, record_id, actor.uid)


class WorkflowRecordService(RecordService):
    """RecordService plus admin-triggered status transitions."""

    def workflow(self, status_field: str = "status") -> Workflow:
        try:
            return self.kind.workflows[status_field]
        except KeyError:
            raise ValidationException(
                f"{self.kind.name} has no workflow on {status_field!r}", field=status_field
            ) from None

    async def transition(
        self,
        record_id: str,
        target: str,
        actor: Actor | None,
        reason: str | None = None,
        *,
        status_field: str = "status",
        context: Mapping[str, Any] | None = None,
    ) -> RecordResult:
        """Load the record and move it to target (see transition_record)."""
        actor = require_actor(actor)
        workflow = self.workflow(status_field)
        if not workflow.is_privileged(actor.role):
            raise UnauthorizedException(action="transition", resource=workflow.name)
        record = await self.get(record_id)
        return await self.transition_record(
            record, target, actor, reason, status_field=status_field, context=context
        )

    async def transition_record(
        self,
        record: RecordResult,
        target: str,
        actor: Actor | None,
        reason: str | None = None,
        *,
        status_field: str = "status",
        context: Mapping[str, Any] | None = None,
    ) -> RecordResult:
        """Apply one transition as a single-document update.

        A transition to the current status returns the record unchanged and
        emits nothing. Otherwise a TransitionCompleted event is published
        after the write.

        Raises:
            UnauthorizedException: actor is not an admin.
            IllegalTransitionException: target not reachable.
            ValidationException: reason missing for a reason-requiring target.
        """
        actor = require_actor(actor)
        workflow = self.workflow(status_field)
        plan = workflow.plan(record.data, target, actor.role, reason)
        if plan.noop:
            logger.debug("%s %s already %s", self.kind.name, record.id, target)
            return record
        updated = await self._repo.update(record.id, plan.updates)
        logger.info(
            "%s %s: %s -> %s by %s",
            self.kind.name,
            record.id,
            plan.from_state,
            plan.to_state,
            actor.uid,
        )
        if self._events is not None:
            self._events.publish(
                TransitionCompleted(
                    workflow=workflow.name,
                    collection=self.kind.collection,
                    record=updated,
                    from_state=plan.from_state,
                    to_state=plan.to_state,
                    actor_id=actor.uid,
                    context=dict(context or {}),
                )
            )
        return updated

    def filter_by_status(
        self,
        records: list[RecordResult],
        status: str | None,
        status_field: str = "status",
    ) -> list[RecordResult]:
        """Keep records whose (read-defaulted) status equals status; None keeps all."""
        if status is None:
            return records
        workflow = self.workflow(status_field)
        return [r for r in records if workflow.current(r.data) == status]
