"""Site-wide documents: feature flags (live) and general settings."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from apa.application.dtos.identity import Actor
from apa.application.interfaces.repositories import IRecordRepository
from apa.application.live_query import LiveQueryService, QuerySnapshot, QueryState, Subscription
from apa.application.services.record_service import require_admin
from apa.domain.exceptions import FeatureDisabledException
from apa.infrastructure.firebase.collections import DOC_CONFIG_GENERAL, DOC_FLAGS_GLOBAL
from apa.schemas.common import parse_payload
from apa.schemas.settings import FeatureFlags, GeneralSettings

logger = logging.getLogger(__name__)


class FeatureFlagService:
    """Process-wide view of flags/global kept current by a live subscription.

    A missing document means every section is enabled. While the store is
    unreachable the last known flags stay in effect.
    """

    def __init__(self, repo: IRecordRepository, live_queries: LiveQueryService) -> None:
        self._repo = repo
        self._live = live_queries
        self._flags = FeatureFlags()
        self._subscription: Subscription | None = None

    @property
    def flags(self) -> FeatureFlags:
        return self._flags

    def is_enabled(self, feature: str) -> bool:
        return bool(getattr(self._flags, feature, True))

    def require(self, feature: str) -> None:
        if not self.is_enabled(feature):
            raise FeatureDisabledException(feature)

    async def _on_snapshot(self, snapshot: QuerySnapshot) -> None:
        if snapshot.state == QueryState.READY:
            try:
                self._flags = FeatureFlags.model_validate(snapshot.records[0].data)
            except ValidationError as e:
                logger.error("Invalid flags/global document; keeping last known values: %s", e)
                return
        elif snapshot.state == QueryState.EMPTY:
            self._flags = FeatureFlags()
        else:
            logger.warning("Feature flags %s; keeping last known values", snapshot.state.value)
            return
        logger.info("Feature flags: %s", self._flags.model_dump())

    async def start(self) -> None:
        """Load flags once, then keep them live until stop()."""
        await self._on_snapshot(await self._live.fetch(self._repo, record_id=DOC_FLAGS_GLOBAL))
        self._subscription = self._live.subscribe(
            self._repo,
            self._on_snapshot,
            record_id=DOC_FLAGS_GLOBAL,
            name="flags/global",
        )

    async def stop(self) -> None:
        if self._subscription is not None:
            await self._subscription.unsubscribe()
            self._subscription = None

    async def replace(self, payload: Any, actor: Actor | None) -> FeatureFlags:
        require_admin(actor, "update", "feature flags")
        flags = parse_payload(FeatureFlags, payload)
        await self._repo.set(DOC_FLAGS_GLOBAL, flags.model_dump())
        self._flags = flags
        return flags


class SettingsService:
    """config/general: donation and contact information."""

    def __init__(self, repo: IRecordRepository) -> None:
        self._repo = repo

    async def get(self) -> dict[str, Any] | None:
        record = await self._repo.get(DOC_CONFIG_GENERAL)
        if record is None:
            return None
        return {k: v for k, v in record.data.items() if k != "updatedAt"}

    async def replace(self, payload: Any, actor: Actor | None) -> dict[str, Any]:
        require_admin(actor, "update", "settings")
        settings = parse_payload(GeneralSettings, payload)
        record = await self._repo.set(DOC_CONFIG_GENERAL, settings.model_dump(mode="json"))
        return {k: v for k, v in record.data.items() if k != "updatedAt"}
