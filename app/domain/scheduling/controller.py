"""
Draft reconciliation - pure transitions over the order draft's scheduling fields.

Every transition takes the current draft and returns the next one without
mutating its input. A rejected transition (stale slot id, past date, slot
outside the current availability) returns the *same* draft object, so
callers can detect rejection with an identity check. Slot ids and labels
are always written together from a catalogue lookup.
"""

import logging
from datetime import date
from typing import Optional

from ...shared.validators import parse_calendar_date
from .availability import available_slots, find_slot
from .schemas import OrderDraft, SlotRole, TimeSlot
from .time_utils import (
    add_days,
    is_before,
    is_time_after_or_equal,
    is_valid_future_date,
    tomorrow_of,
)

logger = logging.getLogger(__name__)

CLEARED_PICKUP_SLOT = {"pickup_slot_id": None, "pickup_slot_label": None}
CLEARED_DELIVERY_SLOT = {"delivery_slot_id": None, "delivery_slot_label": None}


def default_draft(today: date) -> OrderDraft:
    """Pickup today and delivery tomorrow, nothing else chosen"""
    return OrderDraft(pickup_date=today, delivery_date=tomorrow_of(today))


def _coerce_date(value) -> Optional[date]:
    try:
        return parse_calendar_date(value)
    except ValueError:
        return None


def select_pickup_date(draft: OrderDraft, value, today: date) -> OrderDraft:
    """Set (or clear) the pickup date; delivery moves to the next day and both slots reset"""
    if value is None:
        return OrderDraft()

    pickup_date = _coerce_date(value)
    if pickup_date is None or not is_valid_future_date(pickup_date, today):
        logger.warning(f"⚠️ Rejected pickup date {value!r} (before {today.isoformat()} or invalid)")
        return draft

    return draft.model_copy(
        update={
            "pickup_date": pickup_date,
            "delivery_date": add_days(pickup_date, 1),
            **CLEARED_PICKUP_SLOT,
            **CLEARED_DELIVERY_SLOT,
        }
    )


def pick_delivery_slot(pickup_slot: TimeSlot, candidates: list[TimeSlot]) -> Optional[TimeSlot]:
    """
    Same window when offered, otherwise the earliest candidate starting no
    earlier than pickup. None means the customer must choose.
    """
    same_window = find_slot(candidates, pickup_slot.id)
    if same_window is not None:
        return same_window

    for slot in candidates:
        if is_time_after_or_equal(slot.start_time, pickup_slot.start_time):
            return slot
    return None


def derive_delivery_slot(
    draft: OrderDraft, pickup_slot: TimeSlot, catalogue: list[TimeSlot], today: date
) -> Optional[TimeSlot]:
    """Default delivery window for a freshly chosen pickup slot"""
    candidates = available_slots(draft.delivery_date, SlotRole.DELIVERY, draft, catalogue, today)
    return pick_delivery_slot(pickup_slot, candidates)


def select_pickup_slot(
    draft: OrderDraft, slot_id: Optional[str], catalogue: list[TimeSlot], today: date
) -> OrderDraft:
    offered = available_slots(draft.pickup_date, SlotRole.PICKUP, draft, catalogue, today)
    slot = find_slot(offered, slot_id)
    if slot is None:
        logger.warning(
            f"⚠️ Rejected pickup slot {slot_id!r} for {draft.pickup_date} "
            f"({len(offered)} slot(s) offered)"
        )
        return draft

    updated = draft.model_copy(update={"pickup_slot_id": slot.id, "pickup_slot_label": slot.label})

    delivery_slot = derive_delivery_slot(updated, slot, catalogue, today)
    if delivery_slot is None:
        logger.info(f"📭 No delivery slot derivable for pickup slot {slot.id}; manual choice required")
        return updated.model_copy(update=CLEARED_DELIVERY_SLOT)

    return updated.model_copy(
        update={"delivery_slot_id": delivery_slot.id, "delivery_slot_label": delivery_slot.label}
    )


def select_delivery_date(draft: OrderDraft, value, today: date) -> OrderDraft:
    """Set (or clear) the delivery date; the delivery slot always resets"""
    if value is None:
        return draft.model_copy(update={"delivery_date": None, **CLEARED_DELIVERY_SLOT})

    if draft.pickup_date is None:
        logger.warning(f"⚠️ Rejected delivery date {value!r} (no pickup date chosen)")
        return draft

    delivery_date = _coerce_date(value)
    if delivery_date is None or not is_valid_future_date(delivery_date, today):
        logger.warning(f"⚠️ Rejected delivery date {value!r} (before {today.isoformat()} or invalid)")
        return draft

    earliest = add_days(draft.pickup_date, 1)
    if is_before(delivery_date, earliest):
        logger.warning(
            f"⚠️ Rejected delivery date {delivery_date.isoformat()} "
            f"(earliest is {earliest.isoformat()})"
        )
        return draft

    return draft.model_copy(update={"delivery_date": delivery_date, **CLEARED_DELIVERY_SLOT})


def select_delivery_slot(
    draft: OrderDraft, slot_id: Optional[str], catalogue: list[TimeSlot], today: date
) -> OrderDraft:
    if draft.pickup_date is None:
        logger.warning(f"⚠️ Rejected delivery slot {slot_id!r} (no pickup date chosen)")
        return draft

    offered = available_slots(draft.delivery_date, SlotRole.DELIVERY, draft, catalogue, today)
    slot = find_slot(offered, slot_id)
    if slot is None:
        logger.warning(
            f"⚠️ Rejected delivery slot {slot_id!r} for {draft.delivery_date} "
            f"({len(offered)} slot(s) offered)"
        )
        return draft

    return draft.model_copy(update={"delivery_slot_id": slot.id, "delivery_slot_label": slot.label})


def normalize_draft(draft: Optional[OrderDraft], catalogue: list[TimeSlot]) -> OrderDraft:
    """
    Repair a draft built outside the controller.

    Clears slot and delivery references that have no pickup date, clears a
    delivery slot without a delivery date, and re-derives labels from the
    catalogue. With an empty catalogue, ids cannot be checked and are kept.
    """
    if draft is None:
        return OrderDraft()

    fields = draft.model_dump()

    if fields["pickup_date"] is None:
        fields.update(delivery_date=None, **CLEARED_PICKUP_SLOT, **CLEARED_DELIVERY_SLOT)
    if fields["delivery_date"] is None:
        fields.update(CLEARED_DELIVERY_SLOT)

    for prefix in ("pickup", "delivery"):
        id_key, label_key = f"{prefix}_slot_id", f"{prefix}_slot_label"
        if fields[id_key] is None:
            fields[label_key] = None
            continue
        if not catalogue:
            continue
        slot = find_slot(catalogue, fields[id_key])
        if slot is None:
            logger.warning(f"⚠️ Dropping unknown {prefix} slot {fields[id_key]!r} from draft")
            fields[id_key] = None
            fields[label_key] = None
        else:
            fields[label_key] = slot.label

    normalized = OrderDraft(**fields)
    return draft if normalized == draft else normalized
