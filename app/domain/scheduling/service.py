"""Scheduling service - Session state and business logic for pickup/delivery selection"""

import logging
import time
import uuid
from datetime import date
from typing import Callable, Optional, Union

from fastapi import HTTPException

from ...cache import Cache, cache as default_cache
from ...config import BUSINESS_TIMEZONE, DRAFT_PUBLISH_DEBOUNCE_MS, SCHEDULING_SESSION_TTL
from ...services.notification_service import (
    Notifier,
    notify_no_slots_available,
    notify_selection_rejected,
    notify_validation_errors,
)
from . import controller
from .availability import available_slots
from .publisher import DebouncedPublisher
from .repository import SlotRepository, build_slot_source
from .schemas import OrderDraft, SlotRole, TimeSlot
from .time_utils import today_in
from .validation import consistency_errors, is_complete, to_order_payload, validation_errors

logger = logging.getLogger(__name__)


def log_published_draft(draft: OrderDraft) -> None:
    logger.info(
        f"📤 Draft update: pickup={draft.pickup_date} slot={draft.pickup_slot_id} "
        f"delivery={draft.delivery_date} slot={draft.delivery_slot_id}"
    )


class SchedulingSession:
    """
    One customer's pass through the pickup/delivery step.

    Holds the authoritative draft. Every transition is applied immediately,
    in call order, against the latest draft; only the outward publish is
    debounced. "Today" is fixed when the session starts so a session that
    spans midnight keeps a consistent same-day rule.
    """

    def __init__(
        self,
        repository: SlotRepository,
        today: Optional[date] = None,
        draft: Optional[OrderDraft] = None,
        publisher: Optional[DebouncedPublisher] = None,
        notifier: Optional[Notifier] = None,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.today = today or today_in(BUSINESS_TIMEZONE)
        self.repository = repository
        self.notifier = notifier or repository.notifier or Notifier()
        if repository.notifier is None:
            repository.notifier = self.notifier
        self.publisher = publisher
        self._draft = controller.normalize_draft(draft, repository.slots)

    @property
    def draft(self) -> OrderDraft:
        return self._draft

    @property
    def catalogue(self) -> list[TimeSlot]:
        return self.repository.slots

    async def load(self) -> list[TimeSlot]:
        """Fetch the catalogue, then re-check an adopted draft against it"""
        slots = await self.repository.load_slots()
        normalized = controller.normalize_draft(self._draft, slots)
        if normalized is not self._draft:
            self._commit(normalized)
        return slots

    def available_slots(self, candidate_date: Optional[date], role: Union[SlotRole, str]) -> list[TimeSlot]:
        return available_slots(candidate_date, role, self._draft, self.catalogue, self.today)

    def _commit(self, draft: OrderDraft) -> None:
        self._draft = draft
        if self.publisher:
            self.publisher.submit(draft)

    def _apply(self, name: str, transition: Callable[[OrderDraft], OrderDraft]) -> bool:
        current = self._draft
        updated = transition(current)
        if updated is current:
            logger.warning(f"⚠️ Session {self.session_id}: {name} rejected, draft unchanged")
            return False
        self._commit(updated)
        logger.debug(f"Session {self.session_id}: {name} applied")
        return True

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def select_pickup_date(self, value) -> bool:
        accepted = self._apply(
            "select_pickup_date",
            lambda draft: controller.select_pickup_date(draft, value, self.today),
        )
        if not accepted:
            notify_selection_rejected(self.notifier, "Selected pickup date")
        elif value is not None and self.repository.loaded and not self.available_slots(
            self._draft.pickup_date, SlotRole.PICKUP
        ):
            notify_no_slots_available(self.notifier, SlotRole.PICKUP.value)
        return accepted

    def select_pickup_slot(self, slot_id: Optional[str]) -> bool:
        accepted = self._apply(
            "select_pickup_slot",
            lambda draft: controller.select_pickup_slot(draft, slot_id, self.catalogue, self.today),
        )
        if not accepted:
            notify_selection_rejected(self.notifier, "Selected pickup time slot")
        return accepted

    def select_delivery_date(self, value) -> bool:
        accepted = self._apply(
            "select_delivery_date",
            lambda draft: controller.select_delivery_date(draft, value, self.today),
        )
        if not accepted:
            notify_selection_rejected(self.notifier, "Selected delivery date")
        return accepted

    def select_delivery_slot(self, slot_id: Optional[str]) -> bool:
        accepted = self._apply(
            "select_delivery_slot",
            lambda draft: controller.select_delivery_slot(draft, slot_id, self.catalogue, self.today),
        )
        if not accepted:
            notify_selection_rejected(self.notifier, "Selected delivery time slot")
        return accepted

    # ------------------------------------------------------------------
    # Validation and hand-off
    # ------------------------------------------------------------------

    def is_complete(self) -> bool:
        return is_complete(self._draft)

    def validation_errors(self) -> list[str]:
        return validation_errors(self._draft)

    def consistency_errors(self) -> list[str]:
        return consistency_errors(self._draft, self.catalogue, self.today)

    def check_continue(self) -> list[str]:
        """Gate for the continue action; notifies once per missing field"""
        errors = self.validation_errors()
        if errors:
            notify_validation_errors(self.notifier, errors)
        return errors

    def order_payload(self) -> dict:
        if self.publisher:
            self.publisher.flush()
        return to_order_payload(self._draft)

    def abandon(self) -> None:
        """Discard the session; a pending publish is dropped, an in-flight fetch is left alone"""
        if self.publisher:
            self.publisher.cancel()


class SchedulingService:
    """
    In-process registry of scheduling sessions.

    Sessions not touched for `session_ttl` seconds count as abandoned and are
    discarded the next time the registry is used.
    """

    def __init__(
        self,
        source_factory: Callable = build_slot_source,
        cache: Optional[Cache] = default_cache,
        publish_callback: Callable[[OrderDraft], object] = log_published_draft,
        debounce_ms: int = DRAFT_PUBLISH_DEBOUNCE_MS,
        timezone: str = BUSINESS_TIMEZONE,
        clock: Optional[Callable[[], date]] = None,
        session_ttl: int = SCHEDULING_SESSION_TTL,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.source_factory = source_factory
        self.cache = cache
        self.publish_callback = publish_callback
        self.debounce_ms = debounce_ms
        self.timezone = timezone
        self.clock = clock or (lambda: today_in(self.timezone))
        self.session_ttl = session_ttl
        self.timer = timer
        self._sessions: dict[str, SchedulingSession] = {}
        self._last_used: dict[str, float] = {}

    async def start_session(
        self, use_default_dates: bool = False, draft: Optional[OrderDraft] = None
    ) -> SchedulingSession:
        self.evict_idle_sessions()

        notifier = Notifier()
        repository = SlotRepository(self.source_factory(), notifier=notifier, cache=self.cache)
        today = self.clock()
        if draft is None and use_default_dates:
            draft = controller.default_draft(today)

        session = SchedulingSession(
            repository,
            today=today,
            draft=draft,
            publisher=DebouncedPublisher(self.publish_callback, self.debounce_ms),
            notifier=notifier,
        )
        self._sessions[session.session_id] = session
        self._last_used[session.session_id] = self.timer()
        logger.info(f"🗓️ Started scheduling session {session.session_id} (today={today.isoformat()})")

        await session.load()
        return session

    def get_session(self, session_id: str) -> SchedulingSession:
        self.evict_idle_sessions()
        session = self._sessions.get(session_id)
        if not session:
            raise HTTPException(status_code=404, detail="Scheduling session not found")
        self._last_used[session_id] = self.timer()
        return session

    def end_session(self, session_id: str) -> None:
        session = self.get_session(session_id)
        self._discard(session)
        logger.info(f"🗑️ Ended scheduling session {session_id}")

    def evict_idle_sessions(self) -> int:
        """Abandon sessions idle for longer than session_ttl; returns how many were dropped"""
        if self.session_ttl <= 0:
            return 0

        cutoff = self.timer() - self.session_ttl
        idle = [sid for sid, used in self._last_used.items() if used < cutoff]
        for sid in idle:
            self._discard(self._sessions[sid])
        if idle:
            logger.info(f"🧹 Evicted {len(idle)} idle scheduling session(s)")
        return len(idle)

    def _discard(self, session: SchedulingSession) -> None:
        session.abandon()
        self._sessions.pop(session.session_id, None)
        self._last_used.pop(session.session_id, None)

    @property
    def active_sessions(self) -> int:
        return len(self._sessions)
