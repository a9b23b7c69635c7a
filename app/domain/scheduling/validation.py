"""Scheduling validation - is the draft ready for the next checkout step?"""

from datetime import date
from typing import Optional, Union

from pydantic import ValidationError

from .availability import find_slot
from .schemas import OrderDraft, TimeSlot
from .time_utils import add_days, date_string, is_before, same_day

PICKUP_DATE_REQUIRED = "Please select a pickup date"
PICKUP_SLOT_REQUIRED = "Please select a pickup time slot"
DELIVERY_DATE_REQUIRED = "Please select a delivery date"
DELIVERY_SLOT_REQUIRED = "Please select a delivery time slot"


def _as_draft(draft: Union[OrderDraft, dict, None]) -> OrderDraft:
    # Malformed input is treated as an empty (incomplete) draft
    if isinstance(draft, OrderDraft):
        return draft
    if isinstance(draft, dict):
        try:
            return OrderDraft.model_validate(draft)
        except ValidationError:
            return OrderDraft()
    return OrderDraft()


def is_complete(draft: Union[OrderDraft, dict, None]) -> bool:
    draft = _as_draft(draft)
    return all(
        value is not None
        for value in (
            draft.pickup_date,
            draft.pickup_slot_id,
            draft.delivery_date,
            draft.delivery_slot_id,
        )
    )


def validation_errors(draft: Union[OrderDraft, dict, None]) -> list[str]:
    """One message per missing field, always in pickup-then-delivery order"""
    draft = _as_draft(draft)
    errors = []
    if draft.pickup_date is None:
        errors.append(PICKUP_DATE_REQUIRED)
    if draft.pickup_slot_id is None:
        errors.append(PICKUP_SLOT_REQUIRED)
    if draft.delivery_date is None:
        errors.append(DELIVERY_DATE_REQUIRED)
    if draft.delivery_slot_id is None:
        errors.append(DELIVERY_SLOT_REQUIRED)
    return errors


def consistency_errors(
    draft: Union[OrderDraft, dict, None],
    catalogue: Optional[list[TimeSlot]] = None,
    today: Optional[date] = None,
) -> list[str]:
    """
    Problems beyond missing fields: orphaned references, ordering, unknown or
    stale slots. With `today`, a same-day pickup in a disabled slot is reported too.
    """
    draft = _as_draft(draft)
    errors = []

    if draft.pickup_date is None and (
        draft.pickup_slot_id is not None
        or draft.delivery_date is not None
        or draft.delivery_slot_id is not None
    ):
        errors.append("Pickup details are set without a pickup date")
    if draft.delivery_date is None and draft.delivery_slot_id is not None:
        errors.append("Delivery time slot is set without a delivery date")

    earliest_delivery = add_days(draft.pickup_date, 1)
    if is_before(draft.delivery_date, earliest_delivery):
        errors.append(
            f"Delivery date must be on or after {date_string(earliest_delivery)}"
        )

    if catalogue:
        for prefix, slot_id, label in (
            ("pickup", draft.pickup_slot_id, draft.pickup_slot_label),
            ("delivery", draft.delivery_slot_id, draft.delivery_slot_label),
        ):
            if slot_id is None:
                continue
            slot = find_slot(catalogue, slot_id)
            if slot is None:
                errors.append(f"Selected {prefix} time slot no longer exists")
            elif label != slot.label:
                errors.append(f"Selected {prefix} time slot label is out of date")
            if (
                slot is not None
                and prefix == "pickup"
                and not slot.enabled
                and same_day(draft.pickup_date, today)
            ):
                errors.append("Selected pickup time slot is not offered for same-day pickup")

    return errors


def to_order_payload(draft: OrderDraft) -> dict:
    """
    Scheduling columns of an orders row, with ISO calendar dates.

    Raises:
        ValueError: If the draft is not complete
    """
    missing = validation_errors(draft)
    if missing:
        raise ValueError(f"Order draft is incomplete: {', '.join(missing)}")

    return {
        "pickup_date": date_string(draft.pickup_date),
        "pickup_slot_id": draft.pickup_slot_id,
        "delivery_date": date_string(draft.delivery_date),
        "delivery_slot_id": draft.delivery_slot_id,
    }
