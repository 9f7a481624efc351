"""Transition tables for each workflow-bearing record kind."""

from apa.domain.enums import (
    LeadStatus,
    LostPetStatus,
    MedicalRecordStatus,
    ModerationStatus,
    PetStatus,
    RescueStatus,
)
from apa.domain.workflow import Workflow

LEAD = Workflow(
    name="lead",
    states=tuple(LeadStatus.values()),
    initial=LeadStatus.PENDING.value,
    transitions={
        LeadStatus.PENDING.value: frozenset({LeadStatus.APPROVED.value, LeadStatus.REJECTED.value}),
        LeadStatus.APPROVED.value: frozenset({LeadStatus.CONTACTED.value, LeadStatus.PENDING.value}),
        LeadStatus.CONTACTED.value: frozenset({LeadStatus.PENDING.value}),
        LeadStatus.REJECTED.value: frozenset({LeadStatus.PENDING.value}),
    },
    reason_required=frozenset({LeadStatus.REJECTED.value}),
    read_default=LeadStatus.PENDING.value,
)

# Reject of a pendente listing deletes it (PetListingService.reject), so the
# table has no rejected state. disponível is reachable from anywhere.
PET_LISTING = Workflow(
    name="pet_listing",
    states=tuple(s.value for s in PetStatus),
    initial=PetStatus.PENDENTE.value,
    privileged_initial=PetStatus.DISPONIVEL.value,
    transitions={
        PetStatus.DISPONIVEL.value: frozenset({PetStatus.ADOTADO.value, PetStatus.INDISPONIVEL.value}),
    },
    always_reachable=frozenset({PetStatus.DISPONIVEL.value}),
)

LOST_PET_MODERATION = Workflow(
    name="lost_pet_moderation",
    field="moderationStatus",
    states=tuple(s.value for s in ModerationStatus),
    initial=ModerationStatus.PENDING.value,
    transitions={
        ModerationStatus.PENDING.value: frozenset({ModerationStatus.APPROVED.value, ModerationStatus.REJECTED.value}),
        ModerationStatus.REJECTED.value: frozenset({ModerationStatus.APPROVED.value}),
        ModerationStatus.APPROVED.value: frozenset({ModerationStatus.REJECTED.value}),
    },
    read_default=ModerationStatus.PENDING.value,
)

LOST_PET_STATUS = Workflow(
    name="lost_pet_status",
    states=tuple(s.value for s in LostPetStatus),
    initial=LostPetStatus.PERDIDO.value,
    selectable_initial=frozenset({LostPetStatus.PERDIDO.value, LostPetStatus.ENCONTRADO.value}),
    transitions={
        LostPetStatus.PERDIDO.value: frozenset({LostPetStatus.ENCONTRADO.value}),
        LostPetStatus.ENCONTRADO.value: frozenset({LostPetStatus.PERDIDO.value}),
    },
    read_default=LostPetStatus.PERDIDO.value,
)

RESCUE = Workflow(
    name="rescue",
    states=tuple(s.value for s in RescueStatus),
    initial=RescueStatus.PENDENTE.value,
    transitions={
        RescueStatus.PENDENTE.value: frozenset({RescueStatus.EM_ANDAMENTO.value, RescueStatus.CANCELADO.value}),
        RescueStatus.EM_ANDAMENTO.value: frozenset({RescueStatus.CONCLUIDO.value, RescueStatus.CANCELADO.value}),
        RescueStatus.CANCELADO.value: frozenset({RescueStatus.PENDENTE.value}),
    },
    read_default=RescueStatus.PENDENTE.value,
)

MEDICAL_RECORD = Workflow(
    name="medical_record",
    states=tuple(s.value for s in MedicalRecordStatus),
    initial=MedicalRecordStatus.AGENDADO.value,
    selectable_initial=frozenset({MedicalRecordStatus.AGENDADO.value, MedicalRecordStatus.CONCLUIDO.value}),
    transitions={
        MedicalRecordStatus.AGENDADO.value: frozenset({MedicalRecordStatus.CONCLUIDO.value, MedicalRecordStatus.CANCELADO.value}),
        MedicalRecordStatus.CANCELADO.value: frozenset({MedicalRecordStatus.AGENDADO.value}),
    },
    read_default=MedicalRecordStatus.AGENDADO.value,
)
