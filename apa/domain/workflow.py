"""Generic status workflow (transition table) for workflow-bearing records.

One Workflow instance per status axis (lead status, listing status, lost-pet
moderation, ...). The table is pure data; planning a transition never touches
the store. Services apply the returned plan as a single-document update.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from apa.domain.enums import UserRole
from apa.domain.exceptions import (
    IllegalTransitionException,
    UnauthorizedException,
    ValidationException,
)


@dataclass(frozen=True)
class TransitionPlan:
    """Outcome of Workflow.plan: the field updates to write, or a no-op."""

    from_state: str | None
    to_state: str
    updates: dict[str, Any]
    noop: bool = False


@dataclass(frozen=True)
class Workflow:
    """Transition table for one status field.

    Attributes:
        name: Workflow name used in errors and events.
        states: Legal status values.
        initial: Status written on creation.
        transitions: Allowed targets per status.
        field: Record field that holds the status.
        privileged_initial: Initial status when a privileged actor creates the record.
        selectable_initial: Statuses the creator may pick instead of the initial one.
        always_reachable: Targets legal from any status (including an unset one).
        reason_required: Targets that need a non-empty reason.
        reason_field: Record field that stores the reason.
        read_default: Status assumed when the field is missing on read (never written back).
        privileged_roles: Roles allowed to run transitions.
    """

    name: str
    states: tuple[str, ...]
    initial: str
    transitions: Mapping[str, frozenset[str]]
    field: str = "status"
    privileged_initial: str | None = None
    selectable_initial: frozenset[str] = frozenset()
    always_reachable: frozenset[str] = frozenset()
    reason_required: frozenset[str] = frozenset()
    reason_field: str = "rejectionReason"
    read_default: str | None = None
    privileged_roles: frozenset[UserRole] = frozenset({UserRole.ADMIN})

    def __post_init__(self) -> None:
        known = set(self.states)
        referenced = {self.initial} | set(self.selectable_initial) | set(self.always_reachable)
        if self.privileged_initial is not None:
            referenced.add(self.privileged_initial)
        for source, targets in self.transitions.items():
            referenced.add(source)
            referenced.update(targets)
        unknown = referenced - known
        if unknown:
            raise ValueError(f"Workflow {self.name!r} references unknown states: {sorted(unknown)}")

    def is_privileged(self, role: UserRole | str | None) -> bool:
        return role is not None and role in self.privileged_roles

    def initial_for(self, role: UserRole | str | None, requested: str | None = None) -> str:
        """Return the status to write on creation.

        A requested status is honoured only when it is selectable; any other
        client-supplied value is ignored.
        """
        if requested is not None and requested in self.selectable_initial:
            return requested
        if self.privileged_initial is not None and self.is_privileged(role):
            return self.privileged_initial
        return self.initial

    def current(self, data: Mapping[str, Any]) -> str | None:
        """Return the stored status, falling back to read_default when unset."""
        value = data.get(self.field)
        if value is None or value == "":
            return self.read_default
        return value

    def targets(self, state: str | None) -> frozenset[str]:
        """Return every status reachable from state."""
        reachable = set(self.always_reachable)
        if state is not None:
            reachable.update(self.transitions.get(state, frozenset()))
        return frozenset(reachable)

    def can_transition(self, state: str | None, target: str) -> bool:
        return target in self.targets(state)

    def plan(
        self,
        data: Mapping[str, Any],
        target: str,
        role: UserRole | str | None,
        reason: str | None = None,
    ) -> TransitionPlan:
        """Validate a transition request against the table.

        Checks run in a fixed order: actor privilege first (regardless of
        target validity), then target membership, idempotence, reachability
        and finally the reason requirement.

        Raises:
            UnauthorizedException: actor is not privileged.
            IllegalTransitionException: unknown target or target unreachable.
            ValidationException: target requires a reason and none was given.
        """
        if not self.is_privileged(role):
            raise UnauthorizedException(action="transition", resource=self.name)
        current = self.current(data)
        if target not in self.states:
            raise IllegalTransitionException(self.name, current, target)
        if current == target:
            return TransitionPlan(current, target, {}, noop=True)
        if not self.can_transition(current, target):
            raise IllegalTransitionException(self.name, current, target)
        updates: dict[str, Any] = {self.field: target}
        if target in self.reason_required:
            cleaned = (reason or "").strip()
            if not cleaned:
                raise ValidationException(
                    f"A reason is required to move {self.name} to {target!r}",
                    field=self.reason_field,
                )
            updates[self.reason_field] = cleaned
        return TransitionPlan(current, target, updates)
