"""AlertEngine: the notification pipeline and its query/mutation API.

Built once at process start (see ``build_engine``) and handed to every
consumer. Pipeline per event:

    normalize → store.append → dispatcher.dispatch → store.persist → publish
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import ValidationError as PydanticValidationError

from cropalert.channels import PushChannel, PushPermission, build_channels
from cropalert.config import Settings
from cropalert.errors.exceptions import ValidationError
from cropalert.events.bus import NotificationBus
from cropalert.events.publisher import publish_notification
from cropalert.models.analytics import NotificationAnalytics
from cropalert.models.common import StorageResult, TickResult
from cropalert.models.enums import PermissionState, Timeframe
from cropalert.models.events import DomainEvent
from cropalert.models.notification import Notification, NotificationFilters
from cropalert.models.user_config import (
    NotificationConfig,
    NotificationSubscription,
    PushRegistration,
    QuietHours,
)
from cropalert.services.analytics import compute_analytics
from cropalert.services.dispatcher import DeliveryDispatcher
from cropalert.services.normalizer import normalize
from cropalert.services.storage import DurableStorage
from cropalert.services.store import NotificationStore
from cropalert.sources import AVAILABLE_SOURCES, import_source
from cropalert.sources.base import EventSource
from cropalert.workers.scheduler import Clock, PollScheduler, SystemClock

logger = logging.getLogger(__name__)


def detect_device(user_agent: str) -> str:
    return "mobile" if "Mobile" in user_agent else "desktop"


def detect_browser(user_agent: str) -> str:
    for name in ("Chrome", "Firefox", "Safari", "Edge"):
        if name in user_agent:
            return name
    return "Unknown"


class AlertEngine:
    def __init__(
        self,
        store: NotificationStore,
        dispatcher: DeliveryDispatcher,
        permission: PushPermission,
        scheduler: PollScheduler | None = None,
        bus: NotificationBus | None = None,
        redis=None,
        clock: Clock | None = None,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.permission = permission
        self.clock = clock or SystemClock()
        self.scheduler = scheduler or PollScheduler(self.clock)
        self.bus = bus or NotificationBus()
        self.redis = redis
        self._scheduler_running = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def init(self, start_scheduler: bool = True) -> None:
        await self.store.load()
        if start_scheduler and self.scheduler.jobs:
            self.scheduler.start()
            self._scheduler_running = True
        logger.info("Alert engine started (notifications=%d)", len(self.store))

    async def shutdown(self) -> None:
        if self._scheduler_running:
            await self.scheduler.stop()
            self._scheduler_running = False
        await self.store.persist()
        logger.info("Alert engine shutdown complete")

    def register_source(self, source: EventSource, period_seconds: float) -> None:
        self.scheduler.add_source(source, period_seconds, self.handle_source_events)

    def register_cleanup(self, period_seconds: float) -> None:
        async def _cleanup_tick() -> TickResult:
            started_at = self.clock.now()
            evicted = await self.cleanup()
            return TickResult(source_type="cleanup", started_at=started_at, ok=True, events=evicted)

        self.scheduler.add_job("cleanup", period_seconds, _cleanup_tick)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def handle_source_events(self, source_type: str, events: list[DomainEvent]) -> int:
        created = await self.ingest(events)
        if created:
            logger.info("Created %d notifications from %s", len(created), source_type)
        return len(created)

    async def ingest(self, events: Iterable[DomainEvent], user_id: str | None = None) -> list[Notification]:
        """Run events through the pipeline in order. Returns copies of the created notifications."""
        config = await self.store.get_config(user_id) if user_id else None
        created: list[Notification] = []

        for event in events:
            try:
                notification = normalize(event, self.clock.now(), user_id)
            except Exception as exc:
                logger.warning("Could not normalize %s event %s: %s", getattr(event, "kind", "?"), getattr(event, "id", "?"), exc)
                continue

            if config is not None and not config.preferences.allows(notification.type):
                logger.debug("User %s opted out of %s notifications", user_id, notification.type.value)
                continue
            if await self.store.get(notification.id) is not None:
                logger.debug("Notification %s already held, skipping", notification.id)
                continue

            await self.store.append(notification, persist=False)
            await self.dispatcher.dispatch(notification)
            await self.store.persist()

            await self.bus.publish(notification)
            await publish_notification(self.redis, notification)
            created.append(notification.model_copy(deep=True))

        return created

    async def cleanup(self) -> int:
        return await self.store.evict_expired(self.clock.now())

    # ------------------------------------------------------------------
    # Configs
    # ------------------------------------------------------------------

    async def update_config(self, config: NotificationConfig | dict) -> StorageResult | None:
        if isinstance(config, dict):
            try:
                config = NotificationConfig.model_validate(config)
            except PydanticValidationError as exc:
                raise ValidationError(
                    "Invalid notification config",
                    details=[{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()],
                ) from exc
        if not config.user_id or not config.user_id.strip():
            raise ValidationError("Notification config requires a userId")
        return await self.store.put_config(config)

    async def get_config(self, user_id: str) -> NotificationConfig | None:
        return await self.store.get_config(user_id)

    async def quiet_hours_for(self, user_id: str) -> QuietHours | None:
        config = await self.store.get_config(user_id)
        return config.quiet_hours if config is not None else None

    # ------------------------------------------------------------------
    # Push
    # ------------------------------------------------------------------

    async def request_permission(self) -> bool:
        return await self.permission.request()

    async def subscribe_push(self, user_id: str, registration: PushRegistration | None = None) -> bool:
        """Register a push endpoint for ``user_id``. Returns whether a subscription is on record."""
        if not self.permission.supported:
            logger.info("Push not supported, cannot subscribe %s", user_id)
            return False
        if registration is None:
            logger.info("No push registration supplied for %s", user_id)
            return False

        subscription = NotificationSubscription(
            user_id=user_id,
            endpoint=registration.endpoint,
            keys=registration.keys,
            device=detect_device(registration.user_agent),
            browser=detect_browser(registration.user_agent),
            subscribed_at=self.clock.now(),
            is_active=True,
        )
        added = await self.store.add_subscription(subscription)
        if added:
            logger.info("Push subscription created for %s (%s/%s)", user_id, subscription.device, subscription.browser)
        return True

    # ------------------------------------------------------------------
    # Query / mutation
    # ------------------------------------------------------------------

    async def query(self, filters: NotificationFilters | None = None) -> list[Notification]:
        return await self.store.query(filters)

    async def mark_read(self, notification_id: str) -> bool:
        return await self.store.mark_read(notification_id)

    async def mark_all_read(self, user_id: str) -> int:
        return await self.store.mark_all_read(user_id)

    async def delete(self, notification_id: str) -> bool:
        return await self.store.delete(notification_id)

    async def unread_count(self, user_id: str) -> int:
        return await self.store.unread_count(user_id)

    async def analytics(self, user_id: str, timeframe: Timeframe = Timeframe.WEEK) -> NotificationAnalytics:
        snapshot = await self.store.snapshot()
        return compute_analytics(snapshot, user_id, Timeframe(timeframe), self.clock.now())


def build_engine(
    settings: Settings,
    session_factory=None,
    redis=None,
    clock: Clock | None = None,
    sources: dict[str, EventSource] | None = None,
) -> AlertEngine:
    """Wire the engine from settings.

    ``sources`` overrides the simulated sources; otherwise they are registered
    when ``simulated_sources_enabled`` is set.
    """
    clock = clock or SystemClock()
    storage = (
        DurableStorage(session_factory, schema_version=settings.storage_schema_version)
        if session_factory is not None
        else None
    )
    store = NotificationStore(storage, capacity=settings.store_capacity, persist_limit=settings.persist_limit)

    permission = PushPermission(
        prompt=lambda: PermissionState(settings.push_permission_response),
        supported=settings.push_supported,
    )
    engine: AlertEngine | None = None

    async def _quiet_hours(user_id: str) -> QuietHours | None:
        return await engine.quiet_hours_for(user_id)

    push = PushChannel(
        permission,
        icon=settings.push_icon,
        badge=settings.push_badge,
        quiet_hours_lookup=_quiet_hours,
        clock=clock.now,
        local_timezone=settings.local_timezone,
    )
    dispatcher = DeliveryDispatcher(build_channels(push), clock=clock.now)
    engine = AlertEngine(
        store,
        dispatcher,
        permission,
        scheduler=PollScheduler(clock),
        redis=redis,
        clock=clock,
    )

    if sources is None and settings.simulated_sources_enabled:
        sources = {
            source_type: import_source(dotted)(clock=clock.now)
            for source_type, dotted in AVAILABLE_SOURCES.items()
        }
    periods = settings.poll_periods()
    for source_type, source in (sources or {}).items():
        engine.register_source(source, periods.get(source_type, settings.weather_poll_seconds))
    engine.register_cleanup(settings.cleanup_interval_seconds)
    return engine
