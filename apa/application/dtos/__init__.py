"""Application DTOs."""

from apa.application.dtos.identity import Actor, AuthIdentity, SignInResult
from apa.application.dtos.record import (
    ASCENDING,
    DESCENDING,
    FieldFilter,
    RecordQuery,
    RecordResult,
)

__all__ = [
    "ASCENDING",
    "Actor",
    "AuthIdentity",
    "DESCENDING",
    "FieldFilter",
    "RecordQuery",
    "RecordResult",
    "SignInResult",
]
