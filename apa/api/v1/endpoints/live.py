"""Live feeds over WebSocket: /live/{feed}?token=<bearer token>.

Each connection runs one live query and receives
{"type": "snapshot", "state": ..., "records": [...]} whenever its result
changes. The "me/leads/*" feeds show the caller's current lead and accept
{"type": "submit", "payload": {...}}: the new lead is shown optimistically
until the next snapshot from the store replaces it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder

from apa.api.v1 import dependencies as deps
from apa.application.dtos.identity import Actor
from apa.application.dtos.record import DESCENDING, RecordQuery, RecordResult
from apa.application.interfaces.repositories import IRecordRepository
from apa.application.live_query import QuerySnapshot, QueryState, RecordsTransform
from apa.application.projections import OptimisticRecordView, latest_record, sort_listings
from apa.application.services.lead_service import LeadService
from apa.domain.enums import FeatureFlag
from apa.domain.exceptions import ApaException
from apa.infrastructure.firebase.collections import COLLECTION_LOST_PETS

logger = logging.getLogger(__name__)

router = APIRouter()


@dataclass(frozen=True)
class FeedQuery:
    repo: IRecordRepository
    query: RecordQuery
    transform: RecordsTransform | None = None
    leads: LeadService | None = None


@dataclass(frozen=True)
class Feed:
    """How to build one feed's live query for an actor and the connection's query params."""

    build: Callable[[WebSocket, Actor | None, dict[str, str]], FeedQuery]
    admin: bool = False
    authenticated: bool = False
    feature: str | None = None


def _services(websocket: WebSocket) -> tuple[Any, Any]:
    state = websocket.app.state
    return state.store, state.events


def _public_pets(ws: WebSocket, actor: Actor | None, params: dict[str, str]) -> FeedQuery:
    pets = deps.get_pet_service(*_services(ws))
    return FeedQuery(pets.repo, pets.public_query(params.get("species"), params.get("size")), sort_listings)


def _public_lost_pets(ws: WebSocket, actor: Actor | None, params: dict[str, str]) -> FeedQuery:
    lost_pets = deps.get_lost_pet_service(*_services(ws))
    status = params.get("status")
    return FeedQuery(
        lost_pets.repo,
        lost_pets.public_query(),
        lambda records: lost_pets.filter_by_status(records, status),
    )


def _public_posts(ws: WebSocket, actor: Actor | None, params: dict[str, str]) -> FeedQuery:
    posts = deps.get_post_service(_services(ws)[0])
    return FeedQuery(posts.repo, posts.public_query())


def _public_partners(ws: WebSocket, actor: Actor | None, params: dict[str, str]) -> FeedQuery:
    partners = deps.get_partner_service(_services(ws)[0])
    return FeedQuery(partners.repo, partners.public_query())


def _pending_pets(ws: WebSocket, actor: Actor | None, params: dict[str, str]) -> FeedQuery:
    pets = deps.get_pet_service(*_services(ws))
    return FeedQuery(pets.repo, pets.pending_query())


def _moderation_queue(ws: WebSocket, actor: Actor | None, params: dict[str, str]) -> FeedQuery:
    store, _ = _services(ws)
    return FeedQuery(store.repo(COLLECTION_LOST_PETS), RecordQuery().ordered("createdAt", DESCENDING))


def _admin_list(factory: Callable[..., Any]) -> Callable[[WebSocket, Actor | None, dict[str, str]], FeedQuery]:
    def build(ws: WebSocket, actor: Actor | None, params: dict[str, str]) -> FeedQuery:
        service = factory(*_services(ws))
        status = params.get("status")
        return FeedQuery(
            service.repo,
            RecordQuery(order_by=service.kind.default_order),
            lambda records: service.filter_by_status(records, status),
        )

    return build


def _current_lead(factory: Callable[..., LeadService]) -> Callable[[WebSocket, Actor | None, dict[str, str]], FeedQuery]:
    def build(ws: WebSocket, actor: Actor | None, params: dict[str, str]) -> FeedQuery:
        leads = factory(*_services(ws))
        scope = {name: params.get(name, "") for name in leads.scope_fields}
        return FeedQuery(
            leads.repo,
            leads.current_query(actor.uid, **scope),
            _latest_only,
            leads=leads,
        )

    return build


def _latest_only(records: Sequence[RecordResult]) -> list[RecordResult]:
    latest = latest_record(records)
    return [latest] if latest is not None else []


FEEDS: dict[str, Feed] = {
    "pets": Feed(_public_pets, feature=FeatureFlag.ADOPTION.value),
    "lost-pets": Feed(_public_lost_pets, feature=FeatureFlag.LOST_PETS.value),
    "posts": Feed(_public_posts, feature=FeatureFlag.STORIES.value),
    "partners": Feed(_public_partners, feature=FeatureFlag.PARTNERS.value),
    "admin/pets/pending": Feed(_pending_pets, admin=True),
    "admin/lost-pets": Feed(_moderation_queue, admin=True),
    "admin/leads/adoption": Feed(_admin_list(deps.get_adoption_lead_service), admin=True),
    "admin/leads/volunteer": Feed(_admin_list(deps.get_volunteer_lead_service), admin=True),
    "admin/leads/foster": Feed(_admin_list(deps.get_foster_lead_service), admin=True),
    "admin/rescues": Feed(_admin_list(deps.get_rescue_service), admin=True),
    "admin/medical-records": Feed(_admin_list(deps.get_medical_record_service), admin=True),
    **{
        f"me/leads/{kind}": Feed(
            _current_lead(factory),
            authenticated=True,
            feature=deps.LEAD_FEATURES[kind],
        )
        for kind, factory in deps.LEAD_SERVICE_FACTORIES.items()
    },
}


async def _reject_websocket(websocket: WebSocket, reason: str, code: int = 1008) -> None:
    """Accept then immediately close with code/reason so client gets a proper close frame."""
    await websocket.accept()
    await websocket.close(code=code, reason=reason)


async def _resolve_actor(websocket: WebSocket) -> Actor | None:
    token = websocket.query_params.get("token")
    if not token:
        return None
    state = websocket.app.state
    identity = await state.token_verifier.verify(token)
    return await deps.get_identity_service(state.store).resolve(identity)


def _snapshot_message(
    snapshot: QuerySnapshot,
    records: Sequence[RecordResult] | None = None,
    optimistic: bool = False,
) -> dict[str, Any]:
    message = {"type": "snapshot", **snapshot.to_dict(), "optimistic": optimistic}
    if records is not None:
        message["records"] = [r.to_dict() for r in records]
    return jsonable_encoder(message)


@router.websocket("/live/{feed:path}")
async def live_feed(websocket: WebSocket, feed: str):
    """Stream snapshots of one feed until the client disconnects."""
    definition = FEEDS.get(feed)
    if definition is None:
        await _reject_websocket(websocket, "Unknown feed")
        return
    try:
        actor = await _resolve_actor(websocket)
    except ApaException:
        await _reject_websocket(websocket, "Invalid token")
        return
    if (definition.authenticated or definition.admin) and actor is None:
        await _reject_websocket(websocket, "Missing token")
        return
    if definition.admin and not actor.is_admin:
        await _reject_websocket(websocket, "Forbidden")
        return
    if definition.feature is not None and not websocket.app.state.feature_flags.is_enabled(definition.feature):
        await _reject_websocket(websocket, "Feature disabled", code=1000)
        return

    params = {k: v for k, v in websocket.query_params.items() if k != "token"}
    feed_query = definition.build(websocket, actor, params)
    manager = websocket.app.state.ws_manager
    live_queries = websocket.app.state.live_queries
    view = OptimisticRecordView() if feed_query.leads is not None else None

    async def on_snapshot(snapshot: QuerySnapshot) -> None:
        if view is None:
            await manager.send(websocket, _snapshot_message(snapshot))
            return
        if snapshot.authoritative:
            view.apply(snapshot.records)
        shown = [view.current] if view.current is not None else []
        await manager.send(websocket, _snapshot_message(snapshot, shown, view.is_optimistic))

    await manager.connect(websocket)
    try:
        subscription = live_queries.subscribe(
            feed_query.repo,
            on_snapshot,
            feed_query.query,
            transform=feed_query.transform,
            name=f"ws:{feed}",
        )
        await manager.track(websocket, subscription)
        while True:
            message = await websocket.receive_json()
            if not isinstance(message, dict) or message.get("type") != "submit" or view is None:
                await manager.send(websocket, {"type": "error", "error": "UNSUPPORTED_MESSAGE"})
                continue
            try:
                # The flag can be switched off while the socket is open.
                websocket.app.state.feature_flags.require(definition.feature)
                record = await feed_query.leads.create(message.get("payload") or {}, actor)
            except ApaException as e:
                await manager.send(websocket, {"type": "error", **jsonable_encoder(e.to_dict())})
                continue
            if view.current is not None and view.current.id == record.id:
                continue
            view.show(record)
            await manager.send(
                websocket,
                _snapshot_message(QuerySnapshot(QueryState.READY), [record], optimistic=True),
            )
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket)
