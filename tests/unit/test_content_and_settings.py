"""Tests for posts, partners, feature flags and general settings."""

import asyncio
from datetime import UTC, datetime

import pytest

from apa.application.dtos.identity import Actor
from apa.application.live_query import LiveQueryService
from apa.application.services.content_service import PartnerService, PostService
from apa.application.services.site_settings_service import FeatureFlagService, SettingsService
from apa.domain.exceptions import FeatureDisabledException, UnauthorizedException, ValidationException
from apa.infrastructure.memory.record_repo_memory import InMemoryRecordRepository


def _post(title: str, **overrides) -> dict:
    payload = {"title": title, "content": "Conteúdo completo da notícia sobre o evento."}
    payload.update(overrides)
    return payload


async def test_posts_public_list_is_active_newest_publish_date_first(admin: Actor) -> None:
    posts = PostService(InMemoryRecordRepository("posts"))
    await posts.create(_post("Antigo", publishDate="2024-01-01T10:00:00Z"), admin)
    await posts.create(_post("Recente", publishDate="2024-06-01T10:00:00Z"), admin)
    await posts.create(_post("Rascunho", isActive=False), admin)
    await posts.create(_post("Evento", category="evento", publishDate="2024-03-01T10:00:00Z"), admin)

    assert [p.get("title") for p in await posts.list_public()] == ["Recente", "Evento", "Antigo"]
    assert [p.get("title") for p in await posts.list_public("evento")] == ["Evento"]
    assert len(await posts.list_for_admin(admin)) == 4


async def test_post_defaults(admin: Actor, user: Actor) -> None:
    posts = PostService(InMemoryRecordRepository("posts"))
    with pytest.raises(UnauthorizedException):
        await posts.create(_post("Título"), user)
    post = await posts.create(_post("Título"), admin)
    assert post.get("excerpt") == post.get("content")[:100] + "..."
    assert post.get("category") == "notícia"
    assert isinstance(post.get("publishDate"), datetime)
    assert "userId" not in post.data

    updated = await posts.update(post.id, {"publishDate": "2024-02-02T08:00:00"}, admin)
    assert updated.get("publishDate") == datetime(2024, 2, 2, 8, 0, tzinfo=UTC)


async def test_partners_active_by_order(admin: Actor) -> None:
    partners = PartnerService(InMemoryRecordRepository("partners"))
    logo = "https://img.example.org/logo.png"
    await partners.create({"name": "Pet Shop B", "logo": logo, "order": 2}, admin)
    await partners.create({"name": "Clínica A", "logo": logo, "order": 1}, admin)
    await partners.create({"name": "Inativo", "logo": logo, "order": 0, "isActive": False}, admin)
    assert [p.get("name") for p in await partners.list_public()] == ["Clínica A", "Pet Shop B"]


async def test_feature_flags_default_and_live_updates(admin: Actor, user: Actor) -> None:
    repo = InMemoryRecordRepository("flags")
    live = LiveQueryService(poll_interval=0.01)
    flags = FeatureFlagService(repo, live)
    await flags.start()
    try:
        assert flags.is_enabled("lostPets")
        flags.require("adoption")

        with pytest.raises(UnauthorizedException):
            await flags.replace({"lostPets": False}, user)
        await flags.replace({"lostPets": False}, admin)
        assert not flags.is_enabled("lostPets")
        with pytest.raises(FeatureDisabledException):
            flags.require("lostPets")

        # a write from elsewhere reaches the process through the subscription
        await repo.set("global", {"adoption": False})
        for _ in range(100):
            if not flags.is_enabled("adoption"):
                break
            await asyncio.sleep(0.01)
        assert not flags.is_enabled("adoption")
        assert flags.is_enabled("lostPets")
    finally:
        await flags.stop()
        await live.close()


async def test_feature_flags_keep_last_known_values_during_outage(admin: Actor) -> None:
    repo = InMemoryRecordRepository("flags")
    await repo.set("global", {"partners": False})
    live = LiveQueryService(poll_interval=0.01)
    flags = FeatureFlagService(repo, live)
    await flags.start()
    try:
        assert not flags.is_enabled("partners")
        repo.set_unavailable()
        await asyncio.sleep(0.05)
        assert not flags.is_enabled("partners")
    finally:
        await flags.stop()


async def test_malformed_flags_document_keeps_watcher_alive() -> None:
    repo = InMemoryRecordRepository("flags")
    await repo.set("global", {"stories": False})
    live = LiveQueryService(poll_interval=0.01)
    flags = FeatureFlagService(repo, live)
    await flags.start()
    try:
        await repo.set("global", {"stories": False, "adoption": None})
        await asyncio.sleep(0.05)
        assert not flags.is_enabled("stories")
        assert flags.is_enabled("adoption")

        await repo.set("global", {"adoption": False})
        for _ in range(100):
            if not flags.is_enabled("adoption"):
                break
            await asyncio.sleep(0.01)
        assert not flags.is_enabled("adoption")
        assert flags.is_enabled("stories")
        assert live.subscription_count == 1
    finally:
        await flags.stop()
        await live.close()


async def test_general_settings(admin: Actor, user: Actor) -> None:
    settings = SettingsService(InMemoryRecordRepository("config"))
    assert await settings.get() is None
    payload = {
        "pixKey": "apa@example.org",
        "contactPhone": "(11) 3333-4444",
        "contactEmail": "contato@example.org",
        "address": "Rua do Abrigo, 100",
        "donationItems": ["Ração", "Areia"],
    }
    with pytest.raises(UnauthorizedException):
        await settings.replace(payload, user)
    with pytest.raises(ValidationException):
        await settings.replace({**payload, "pixKey": "123"}, admin)
    saved = await settings.replace(payload, admin)
    assert saved["donationItems"] == ["Ração", "Areia"]
    assert (await settings.get())["pixKey"] == "apa@example.org"
