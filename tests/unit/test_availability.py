from datetime import date, timedelta

from app.domain.scheduling.availability import available_slots, find_slot
from app.domain.scheduling.schemas import OrderDraft, SlotRole
from tests.conftest import make_slot

TODAY = date(2025, 3, 10)


def ids(slots):
    return [slot.id for slot in slots]


def test_no_date_means_no_slots(catalogue, empty_draft):
    assert available_slots(None, SlotRole.PICKUP, empty_draft, catalogue, TODAY) == []
    assert available_slots(None, SlotRole.DELIVERY, empty_draft, catalogue, TODAY) == []


def test_empty_catalogue_degrades_to_no_slots(empty_draft):
    assert available_slots(TODAY, SlotRole.PICKUP, empty_draft, [], TODAY) == []
    assert available_slots(TODAY, "delivery", empty_draft, [], TODAY) == []


def test_same_day_pickup_only_offers_enabled_slots(catalogue, empty_draft):
    slots = available_slots(TODAY, SlotRole.PICKUP, empty_draft, catalogue, TODAY)
    assert ids(slots) == ["1", "2"]
    assert all(slot.enabled for slot in slots)


def test_future_pickup_offers_full_catalogue_regardless_of_enabled(catalogue, empty_draft):
    for offset in (1, 2, 30):
        slots = available_slots(TODAY + timedelta(days=offset), SlotRole.PICKUP, empty_draft, catalogue, TODAY)
        assert ids(slots) == ["1", "2", "3", "4"]


def test_delivery_without_pickup_slot_offers_full_catalogue(catalogue):
    draft = OrderDraft(pickup_date=TODAY, delivery_date=TODAY + timedelta(days=1))
    slots = available_slots(draft.delivery_date, SlotRole.DELIVERY, draft, catalogue, TODAY)
    assert ids(slots) == ["1", "2", "3", "4"]


def test_next_day_delivery_starts_no_earlier_than_pickup(catalogue):
    draft = OrderDraft(
        pickup_date=TODAY,
        pickup_slot_id="2",
        delivery_date=TODAY + timedelta(days=1),
    )
    slots = available_slots(draft.delivery_date, SlotRole.DELIVERY, draft, catalogue, TODAY)
    assert ids(slots) == ["2", "3", "4"]


def test_delivery_ignores_enabled_flag(catalogue):
    draft = OrderDraft(pickup_date=TODAY, pickup_slot_id="1", delivery_date=TODAY + timedelta(days=1))
    slots = available_slots(draft.delivery_date, SlotRole.DELIVERY, draft, catalogue, TODAY)
    # Slots 3 and 4 are disabled for same-day pickup but still deliverable
    assert "3" in ids(slots) and "4" in ids(slots)


def test_delivery_two_days_after_pickup_is_unconstrained(catalogue):
    draft = OrderDraft(pickup_date=TODAY, pickup_slot_id="4", delivery_date=TODAY + timedelta(days=1))
    slots = available_slots(TODAY + timedelta(days=2), SlotRole.DELIVERY, draft, catalogue, TODAY)
    assert ids(slots) == ["1", "2", "3", "4"]


def test_delivery_filter_compares_normalized_times():
    catalogue = [
        make_slot("a", "9:00", "10:00"),
        make_slot("b", "10:00", "11:00"),
    ]
    draft = OrderDraft(pickup_date=TODAY, pickup_slot_id="b", delivery_date=TODAY + timedelta(days=1))
    slots = available_slots(draft.delivery_date, SlotRole.DELIVERY, draft, catalogue, TODAY)
    assert ids(slots) == ["b"]


def test_filter_preserves_catalogue_order(catalogue, empty_draft):
    slots = available_slots(TODAY + timedelta(days=3), SlotRole.PICKUP, empty_draft, catalogue, TODAY)
    starts = [slot.start_time for slot in slots]
    assert starts == sorted(starts)


def test_find_slot_coerces_ids(catalogue):
    assert find_slot(catalogue, 2).id == "2"
    assert find_slot(catalogue, "missing") is None
    assert find_slot(catalogue, None) is None
