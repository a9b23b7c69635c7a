"""
Availability filter - which time slots may be offered for a date and role.

Rules:
- Pickup today: only enabled slots. The enabled flag marks windows that
  cannot be staffed today; it has no effect on any other date or on delivery.
- Pickup on a future date: the full catalogue.
- Delivery the day after pickup, with a pickup slot chosen: slots starting
  at or after the pickup slot's start time.
- Any other delivery date: the full catalogue.

The catalogue order (ascending start time) is preserved.
"""

from datetime import date
from typing import Optional, Union

from .schemas import OrderDraft, SlotRole, TimeSlot
from .time_utils import add_days, is_time_after_or_equal, same_day


def find_slot(catalogue: list[TimeSlot], slot_id: Optional[str]) -> Optional[TimeSlot]:
    if slot_id is None:
        return None
    slot_id = str(slot_id)
    return next((slot for slot in catalogue if slot.id == slot_id), None)


def available_pickup_slots(candidate_date: date, catalogue: list[TimeSlot], today: date) -> list[TimeSlot]:
    if same_day(candidate_date, today):
        return [slot for slot in catalogue if slot.enabled]
    return list(catalogue)


def available_delivery_slots(
    candidate_date: date, draft: OrderDraft, catalogue: list[TimeSlot]
) -> list[TimeSlot]:
    if draft.pickup_date is None or draft.pickup_slot_id is None:
        return list(catalogue)

    day_after_pickup = add_days(draft.pickup_date, 1)
    pickup_slot = find_slot(catalogue, draft.pickup_slot_id)

    if pickup_slot is not None and same_day(candidate_date, day_after_pickup):
        return [
            slot
            for slot in catalogue
            if is_time_after_or_equal(slot.start_time, pickup_slot.start_time)
        ]

    # Two or more days after pickup leaves a full day of buffer: no constraint
    return list(catalogue)


def available_slots(
    candidate_date: Optional[date],
    role: Union[SlotRole, str],
    draft: OrderDraft,
    catalogue: list[TimeSlot],
    today: date,
) -> list[TimeSlot]:
    """Ordered subset of the catalogue that is legal to offer; never raises"""
    if candidate_date is None or not catalogue:
        return []

    if SlotRole(role) == SlotRole.PICKUP:
        return available_pickup_slots(candidate_date, catalogue, today)
    return available_delivery_slots(candidate_date, draft, catalogue)
