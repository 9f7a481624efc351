"""Admin spreadsheet exports (CSV) of leads, rescues and medical records."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from apa.application.dtos.identity import Actor
from apa.application.dtos.record import DESCENDING, RecordQuery
from apa.application.services.record_service import require_admin
from apa.domain.exceptions import ResourceNotFoundException
from apa.domain.workflow import Workflow
from apa.domain.workflows import LEAD, MEDICAL_RECORD, RESCUE
from apa.infrastructure.firebase.collections import (
    COLLECTION_LEADS_ADOPTION,
    COLLECTION_LEADS_FOSTER,
    COLLECTION_LEADS_VOLUNTEER,
    COLLECTION_MEDICAL_RECORDS,
    COLLECTION_RESCUES,
)
from apa.infrastructure.store import RecordStore
from apa.shared.utils.datetime import format_br_date, utc_now
from apa.shared.utils.masks import mask_phone
from apa.shared.utils.tabular_export import Column, field_column, to_csv

logger = logging.getLogger(__name__)


def _date_column(header: str, key: str) -> Column:
    return Column(header, lambda row: format_br_date(row.get(key)))


def _phone_column(header: str, key: str = "phone") -> Column:
    return Column(header, lambda row: mask_phone(row.get(key) or ""))


def _status_column(workflow: Workflow, header: str = "Status") -> Column:
    return Column(header, lambda row: workflow.current(row))


@dataclass(frozen=True)
class ExportDefinition:
    collection: str
    filename_prefix: str
    columns: Sequence[Column]
    order_field: str = "createdAt"


EXPORTS: Mapping[str, ExportDefinition] = {
    "adoption-leads": ExportDefinition(
        COLLECTION_LEADS_ADOPTION,
        "leads_adocao",
        (
            _date_column("Data", "createdAt"),
            field_column("Nome", "name"),
            field_column("Email", "email"),
            _phone_column("Telefone"),
            field_column("Pet ID", "petId"),
            field_column("Mensagem", "message"),
            _status_column(LEAD),
            field_column("Motivo Rejeição", "rejectionReason"),
        ),
    ),
    "volunteer-leads": ExportDefinition(
        COLLECTION_LEADS_VOLUNTEER,
        "voluntarios",
        (
            _date_column("Data", "createdAt"),
            field_column("Nome", "name"),
            field_column("Email", "email"),
            _phone_column("Telefone"),
            field_column("Área", "area"),
            field_column("Mensagem", "message"),
            _status_column(LEAD),
        ),
    ),
    "foster-leads": ExportDefinition(
        COLLECTION_LEADS_FOSTER,
        "lares_temporarios",
        (
            _date_column("Data", "createdAt"),
            field_column("Nome", "name"),
            field_column("Email", "email"),
            _phone_column("Telefone"),
            field_column("Endereço", "address"),
            field_column("Moradia", "dwellingType"),
            field_column("Outros Pets", "hasOtherPets"),
            field_column("Pessoas na Casa", "householdCount"),
            field_column("Disponibilidade", "availability"),
            _status_column(LEAD),
            field_column("Motivo Rejeição", "rejectionReason"),
        ),
    ),
    "rescues": ExportDefinition(
        COLLECTION_RESCUES,
        "resgates_apa",
        (
            _date_column("Data", "createdAt"),
            field_column("Descrição", "description"),
            field_column("Localização", "location"),
            field_column("Urgência", "urgency"),
            _status_column(RESCUE),
            field_column("Contato", "contactInfo"),
        ),
    ),
    "medical-records": ExportDefinition(
        COLLECTION_MEDICAL_RECORDS,
        "prontuarios_apa",
        (
            _date_column("Data", "date"),
            field_column("Pet", "petName"),
            field_column("Procedimento", "procedure"),
            field_column("Tipo", "type"),
            field_column("Veterinário", "vetName"),
            _status_column(MEDICAL_RECORD),
            field_column("Notas", "notes"),
        ),
        order_field="date",
    ),
}


class ExportService:
    def __init__(self, store: RecordStore) -> None:
        self._store = store

    async def export(self, name: str, actor: Actor | None) -> tuple[str, str]:
        """Render one export as (filename, csv text), newest rows first."""
        actor = require_admin(actor, "export", name)
        definition = EXPORTS.get(name)
        if definition is None:
            raise ResourceNotFoundException("export", name)
        repo = self._store.repo(definition.collection)
        records = await repo.query(RecordQuery().ordered(definition.order_field, DESCENDING))
        rows: list[dict[str, Any]] = [r.data for r in records]
        filename = f"{definition.filename_prefix}_{utc_now().date().isoformat()}.csv"
        logger.info("Export %s (%d rows) by %s", name, len(rows), actor.uid)
        return filename, to_csv(rows, definition.columns)
