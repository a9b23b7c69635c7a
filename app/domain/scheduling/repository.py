"""Slot repository - Loads the time slot catalogue once per scheduling session"""

import asyncio
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ...cache import SLOT_CATALOGUE_KEY, Cache
from ...config import (
    SLOT_CACHE_TTL,
    SLOT_FETCH_TIMEOUT,
    SUPABASE_ANON_KEY,
    SUPABASE_URL,
    TIME_SLOTS_TABLE,
)
from ...database import SessionLocal
from ...models import TimeSlot as TimeSlotRow
from ...services.notification_service import Notifier, notify_slot_load_failed
from .schemas import TimeSlot

logger = logging.getLogger(__name__)


class SupabaseSlotSource:
    """Reads time slots from the hosted backend's REST API"""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = TIME_SLOTS_TABLE,
        timeout: float = SLOT_FETCH_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.timeout = timeout
        self.transport = transport

    async def fetch(self) -> list[dict]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.get(
                f"{self.base_url}/rest/v1/{self.table}",
                params={"select": "*", "order": "start_time"},
                headers=headers,
            )
            logger.info(f"📡 Time slot API response status: {response.status_code}")
            response.raise_for_status()
            data = response.json()

        if not isinstance(data, list):
            raise ValueError("Unexpected time slot payload (expected a list)")
        return data


class DatabaseSlotSource:
    """Reads time slots from the local time_slots table"""

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    async def fetch(self) -> list[dict]:
        db = self.session_factory()
        try:
            rows = db.query(TimeSlotRow).order_by(TimeSlotRow.start_time).all()
            return [
                {
                    "id": row.id,
                    "label": row.label,
                    "start_time": row.start_time,
                    "end_time": row.end_time,
                    "enabled": row.enabled,
                }
                for row in rows
            ]
        finally:
            db.close()


def build_slot_source():
    """Hosted backend when configured, local database otherwise"""
    if SUPABASE_URL and SUPABASE_ANON_KEY:
        return SupabaseSlotSource(SUPABASE_URL, SUPABASE_ANON_KEY)
    return DatabaseSlotSource()


def parse_slot_records(records: list[dict]) -> list[TimeSlot]:
    """Validate raw records and sort them by start time; malformed rows are skipped"""
    slots: list[TimeSlot] = []
    for record in records or []:
        try:
            slots.append(TimeSlot.model_validate(record))
        except ValidationError as e:
            logger.warning(f"⚠️ Skipping malformed time slot {record!r}: {e.error_count()} error(s)")
    # start_time is normalized to HH:MM, so string order is time order
    return sorted(slots, key=lambda slot: slot.start_time)


class SlotRepository:
    """
    Owns the slot catalogue and its loading/error state.

    The catalogue is fetched at most once; concurrent callers share the
    in-flight fetch. A failed fetch resolves to an empty catalogue, records
    the error and notifies the user. There is no automatic retry; callers
    may call reload().
    """

    def __init__(
        self,
        source=None,
        notifier: Optional[Notifier] = None,
        cache: Optional[Cache] = None,
        cache_ttl: int = SLOT_CACHE_TTL,
    ):
        self.source = source if source is not None else build_slot_source()
        self.notifier = notifier
        self.cache = cache
        self.cache_ttl = cache_ttl
        self._slots: list[TimeSlot] = []
        self._loaded = False
        self._loading = False
        self._error: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def slots(self) -> list[TimeSlot]:
        """Current catalogue; empty while loading or after a failure"""
        return list(self._slots)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def error(self) -> Optional[str]:
        return self._error

    def find(self, slot_id: Optional[str]) -> Optional[TimeSlot]:
        if slot_id is None:
            return None
        for slot in self._slots:
            if slot.id == str(slot_id):
                return slot
        return None

    async def load_slots(self) -> list[TimeSlot]:
        if self._loaded:
            return self.slots
        if self._task is None:
            self._loading = True
            self._task = asyncio.ensure_future(self._load())
        # A cancelled caller must not cancel the shared fetch
        return await asyncio.shield(self._task)

    async def reload(self) -> list[TimeSlot]:
        """Explicit retry after a failure (or after slots were edited)"""
        if self._task is not None and not self._task.done():
            return await asyncio.shield(self._task)
        self._loaded = False
        self._task = None
        if self.cache:
            self.cache.delete(SLOT_CATALOGUE_KEY)
        return await self.load_slots()

    async def _load(self) -> list[TimeSlot]:
        self._loading = True
        self._error = None
        try:
            records = self.cache.get(SLOT_CATALOGUE_KEY) if self.cache else None
            if records is None:
                records = await self.source.fetch()
                if self.cache:
                    self.cache.set(SLOT_CATALOGUE_KEY, records, self.cache_ttl)
            self._slots = parse_slot_records(records)
            logger.info(f"✅ Loaded {len(self._slots)} time slots")
        except Exception as e:
            logger.error(f"❌ Error fetching time slots: {e}")
            self._slots = []
            self._error = str(e) or e.__class__.__name__
            if self.notifier:
                notify_slot_load_failed(self.notifier)
        finally:
            self._loading = False
            self._loaded = True
        return self.slots
