"""Scheduling domain schemas - Pydantic models for slots, drafts and requests"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...services.notification_service import Notification
from ...shared.validators import normalize_time_string, parse_calendar_date


class SlotRole(str, Enum):
    """Which half of the order a slot is being offered for"""

    PICKUP = "pickup"
    DELIVERY = "delivery"


class TimeSlot(BaseModel):
    """A fixed daily time window; read-only for the scheduling engine"""

    id: str
    label: str
    start_time: str
    end_time: str
    enabled: bool = True

    class Config:
        from_attributes = True
        frozen = True

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        # Supabase returns uuids, fixtures often use integers
        if v is None:
            raise ValueError("Slot id is required")
        return str(v)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def normalize_time(cls, v):
        return normalize_time_string(v)

    @model_validator(mode="after")
    def check_window(self):
        if self.start_time >= self.end_time:
            raise ValueError(
                f"Slot {self.id} starts at {self.start_time} but ends at {self.end_time}"
            )
        return self


class OrderDraft(BaseModel):
    """
    Scheduling subset of an order in progress.

    Invariants are maintained by the reconciliation controller, not by this
    model: drafts built elsewhere may be malformed and must still load.
    """

    pickup_date: Optional[date] = None
    pickup_slot_id: Optional[str] = None
    pickup_slot_label: Optional[str] = None
    delivery_date: Optional[date] = None
    delivery_slot_id: Optional[str] = None
    delivery_slot_label: Optional[str] = None

    @field_validator("pickup_date", "delivery_date", mode="before")
    @classmethod
    def coerce_date(cls, v):
        return parse_calendar_date(v)

    @field_validator("pickup_slot_id", "delivery_slot_id", mode="before")
    @classmethod
    def coerce_slot_id(cls, v):
        if v is None or v == "":
            return None
        return str(v)


# ============================================================================
# REQUEST / RESPONSE SCHEMAS
# ============================================================================


class StartSessionRequest(BaseModel):
    """Schema for starting a scheduling session"""

    useDefaultDates: bool = False
    draft: Optional[OrderDraft] = None


class DateSelection(BaseModel):
    """Pickup or delivery date; null deselects"""

    selectedDate: Optional[date] = None

    @field_validator("selectedDate", mode="before")
    @classmethod
    def coerce_date(cls, v):
        return parse_calendar_date(v)


class SlotSelection(BaseModel):
    """Pickup or delivery slot chosen by id"""

    slotId: str

    @field_validator("slotId", mode="before")
    @classmethod
    def coerce_slot_id(cls, v):
        if v is None or v == "":
            raise ValueError("slotId is required")
        return str(v)


class ValidationResponse(BaseModel):
    isComplete: bool
    errors: list[str]
    consistencyErrors: list[str] = []


class SessionResponse(BaseModel):
    """Schema for a session snapshot returned by every transition"""

    sessionId: str
    today: date
    draft: OrderDraft
    accepted: bool = True
    validation: ValidationResponse
    notifications: list[Notification] = []


class SlotCatalogueResponse(BaseModel):
    slots: list[TimeSlot]
    loading: bool
    error: Optional[str] = None


class AvailableSlotsResponse(BaseModel):
    candidateDate: Optional[date]
    role: SlotRole
    slots: list[TimeSlot]


class ContinueResponse(BaseModel):
    """Result of the continue gate; order is set only when the draft is complete"""

    sessionId: str
    isComplete: bool
    errors: list[str]
    notifications: list[Notification] = []
    order: Optional[dict] = None
