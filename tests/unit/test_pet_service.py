"""Tests for PetListingService (registration, approval queue, catalogue, reorder)."""

import pytest

from apa.application.dtos.identity import Actor
from apa.application.services.pet_service import PetListingService
from apa.domain.exceptions import (
    IllegalTransitionException,
    ResourceNotFoundException,
    UnauthorizedException,
    ValidationException,
)
from apa.infrastructure.memory.record_repo_memory import InMemoryRecordRepository


def _pet_payload(**overrides) -> dict:
    payload = {
        "species": "Gato",
        "gender": "Fêmea",
        "name": "Mia",
        "ageValue": 1,
        "ageUnit": "anos",
        "size": "P",
        "description": "Muito carinhosa e calma",
        "address": "Rua das Flores, 10",
        "contactPhone": "(11) 98765-4321",
        "photos": ["https://res.cloudinary.com/demo/image/upload/mia.jpg"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def pets() -> PetListingService:
    return PetListingService(InMemoryRecordRepository("pets"), max_photos=3)


async def test_user_registration_starts_pendente(pets: PetListingService, user: Actor) -> None:
    pet = await pets.create(_pet_payload(status="disponível"), user)
    assert pet.get("status") == "pendente"
    assert pet.get("age") == "1 ano"
    assert pet.get("tags") == ["Gato", "Fêmea", "P"]
    assert pet.get("contactPhone") == "11987654321"
    assert "ageValue" not in pet.data


async def test_admin_registration_starts_disponivel(pets: PetListingService, admin: Actor) -> None:
    pet = await pets.create(_pet_payload(ageValue=5, ageUnit="meses"), admin)
    assert pet.get("status") == "disponível"
    assert pet.get("age") == "5 meses"


async def test_photo_limits(pets: PetListingService, user: Actor) -> None:
    with pytest.raises(ValidationException):
        await pets.create(_pet_payload(photos=[]), user)
    too_many = [f"https://img.example.org/{i}.jpg" for i in range(4)]
    with pytest.raises(ValidationException) as exc_info:
        await pets.create(_pet_payload(photos=too_many), user)
    assert exc_info.value.field == "photos"


async def test_approval_queue_and_approve(pets: PetListingService, user: Actor, admin: Actor) -> None:
    pending = await pets.create(_pet_payload(), user)
    assert [p.id for p in await pets.list_pending(admin)] == [pending.id]
    assert await pets.list_public() == []
    with pytest.raises(ResourceNotFoundException):
        await pets.get_public(pending.id)

    approved = await pets.approve(pending.id, admin)
    assert approved.get("status") == "disponível"
    assert await pets.list_pending(admin) == []
    assert [p.id for p in await pets.list_public()] == [pending.id]
    # idempotent
    assert (await pets.approve(pending.id, admin)).get("status") == "disponível"


async def test_approve_requires_admin(pets: PetListingService, user: Actor) -> None:
    pending = await pets.create(_pet_payload(), user)
    with pytest.raises(UnauthorizedException):
        await pets.approve(pending.id, user)


async def test_reject_deletes_pendente_only(pets: PetListingService, user: Actor, admin: Actor) -> None:
    pending = await pets.create(_pet_payload(), user)
    await pets.reject(pending.id, admin)
    with pytest.raises(ResourceNotFoundException):
        await pets.get(pending.id)

    listed = await pets.create(_pet_payload(), admin)
    with pytest.raises(IllegalTransitionException):
        await pets.reject(listed.id, admin)


async def test_adopted_listing_can_be_reverted(pets: PetListingService, admin: Actor) -> None:
    pet = await pets.create(_pet_payload(), admin)
    await pets.transition(pet.id, "adotado", admin)
    assert (await pets.get_public(pet.id)).get("status") == "adotado"
    assert (await pets.transition(pet.id, "disponível", admin)).get("status") == "disponível"
    with pytest.raises(IllegalTransitionException):
        await pets.transition(pet.id, "pendente", admin)


async def test_public_filters(pets: PetListingService, admin: Actor) -> None:
    await pets.create(_pet_payload(name="Mia"), admin)
    await pets.create(_pet_payload(name="Rex", species="Cachorro", gender="Macho", size="G"), admin)
    dogs = await pets.list_public(species="Cachorro")
    assert [p.get("name") for p in dogs] == ["Rex"]
    small = await pets.list_public(size="P")
    assert [p.get("name") for p in small] == ["Mia"]


async def test_reorder_five_pets_atomically(pets: PetListingService, admin: Actor) -> None:
    created = [await pets.create(_pet_payload(name=f"Pet {i}"), admin) for i in range(5)]
    new_order = [created[i].id for i in (3, 0, 4, 1, 2)]
    await pets.reorder(new_order, admin)
    listed = await pets.list_public()
    assert [p.id for p in listed] == new_order
    assert [p.get("sortOrder") for p in listed] == [0, 1, 2, 3, 4]


async def test_reorder_rejects_unknown_or_duplicate_ids(pets: PetListingService, admin: Actor) -> None:
    pet = await pets.create(_pet_payload(), admin)
    with pytest.raises(ResourceNotFoundException):
        await pets.reorder([pet.id, "missing"], admin)
    assert (await pets.get(pet.id)).get("sortOrder") is None
    with pytest.raises(ValidationException):
        await pets.reorder([pet.id, pet.id], admin)


async def test_admin_edit_keeps_status(pets: PetListingService, user: Actor, admin: Actor) -> None:
    pet = await pets.create(_pet_payload(), user)
    updated = await pets.update(pet.id, {"description": "Nova descrição longa", "status": "adotado"}, admin)
    assert updated.get("description") == "Nova descrição longa"
    assert updated.get("status") == "pendente"
    with pytest.raises(UnauthorizedException):
        await pets.update(pet.id, {"name": "Outro"}, user)


async def test_admin_edit_relabels_age(pets: PetListingService, admin: Actor) -> None:
    pet = await pets.create(_pet_payload(ageValue=3, ageUnit="anos"), admin)
    updated = await pets.update(pet.id, {"ageValue": 1, "ageUnit": "meses"}, admin)
    assert updated.get("age") == "1 mês"
    assert "ageValue" not in updated.data
    assert "ageUnit" not in updated.data


async def test_admin_edit_rejects_age_without_unit(pets: PetListingService, admin: Actor) -> None:
    pet = await pets.create(_pet_payload(), admin)
    with pytest.raises(ValidationException):
        await pets.update(pet.id, {"ageValue": 2}, admin)
    with pytest.raises(ValidationException):
        await pets.update(pet.id, {"age": "muito velho"}, admin)
