"""
Scheduling Domain

Pickup/delivery slot selection for laundry orders: the slot catalogue,
availability rules, draft transitions and the continue gate.

Structure:
- time_utils.py    # Null-safe date helpers, 24-hour time comparison, session "today"
- schemas.py       # TimeSlot, OrderDraft, request/response models
- repository.py    # Slot catalogue loading (hosted backend or local table)
- availability.py  # Which slots may be offered for a date and role
- controller.py    # Pure draft transitions and pickup -> delivery derivation
- validation.py    # Completeness, consistency, order hand-off
- publisher.py     # Debounced outbound draft writes
- service.py       # Session state and registry
- router.py        # /scheduling endpoints
"""

from .router import router

__all__ = ["router"]
