"""Scheduling router - FastAPI endpoints for pickup/delivery slot selection"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from .schemas import (
    AvailableSlotsResponse,
    ContinueResponse,
    DateSelection,
    SessionResponse,
    SlotCatalogueResponse,
    SlotRole,
    SlotSelection,
    StartSessionRequest,
    ValidationResponse,
)
from .service import SchedulingService, SchedulingSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scheduling", tags=["Scheduling"])

_service: Optional[SchedulingService] = None


def get_scheduling_service() -> SchedulingService:
    """Dependency injection for SchedulingService (one registry per process)"""
    global _service
    if _service is None:
        _service = SchedulingService()
    return _service


def _session_response(session: SchedulingSession, accepted: bool = True) -> SessionResponse:
    return SessionResponse(
        sessionId=session.session_id,
        today=session.today,
        draft=session.draft,
        accepted=accepted,
        validation=ValidationResponse(
            isComplete=session.is_complete(),
            errors=session.validation_errors(),
            consistencyErrors=session.consistency_errors(),
        ),
        notifications=session.notifier.drain(),
    )


# ============================================================================
# SESSIONS
# ============================================================================


@router.post("/sessions", response_model=SessionResponse)
async def start_session(
    data: Optional[StartSessionRequest] = None,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Start a scheduling step; loads the slot catalogue for the session"""
    data = data or StartSessionRequest()
    session = await service.start_session(use_default_dates=data.useDefaultDates, draft=data.draft)
    return _session_response(session)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, service: SchedulingService = Depends(get_scheduling_service)):
    """Current draft and validation state"""
    return _session_response(service.get_session(session_id))


@router.delete("/sessions/{session_id}")
async def end_session(session_id: str, service: SchedulingService = Depends(get_scheduling_service)):
    """Abandon the scheduling step and discard the draft"""
    service.end_session(session_id)
    return {"success": True}


# ============================================================================
# SLOTS
# ============================================================================


@router.get("/sessions/{session_id}/slots", response_model=SlotCatalogueResponse)
async def get_slot_catalogue(
    session_id: str, service: SchedulingService = Depends(get_scheduling_service)
):
    """Full slot catalogue with its loading/error state"""
    session = service.get_session(session_id)
    repository = session.repository
    return SlotCatalogueResponse(
        slots=repository.slots, loading=repository.loading, error=repository.error
    )


@router.post("/sessions/{session_id}/slots/reload", response_model=SlotCatalogueResponse)
async def reload_slot_catalogue(
    session_id: str, service: SchedulingService = Depends(get_scheduling_service)
):
    """Retry a failed catalogue fetch"""
    session = service.get_session(session_id)
    await session.repository.reload()
    await session.load()
    repository = session.repository
    return SlotCatalogueResponse(
        slots=repository.slots, loading=repository.loading, error=repository.error
    )


@router.get("/sessions/{session_id}/slots/available", response_model=AvailableSlotsResponse)
async def get_available_slots(
    session_id: str,
    role: SlotRole = Query(SlotRole.PICKUP),
    candidate_date: Optional[date] = Query(None, alias="date"),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Slots that may be offered for a date; defaults to the draft's date for the role"""
    session = service.get_session(session_id)
    if candidate_date is None:
        candidate_date = (
            session.draft.pickup_date if role == SlotRole.PICKUP else session.draft.delivery_date
        )
    return AvailableSlotsResponse(
        candidateDate=candidate_date,
        role=role,
        slots=session.available_slots(candidate_date, role),
    )


# ============================================================================
# TRANSITIONS
# ============================================================================


@router.post("/sessions/{session_id}/pickup-date", response_model=SessionResponse)
async def select_pickup_date(
    session_id: str,
    data: DateSelection,
    service: SchedulingService = Depends(get_scheduling_service),
):
    session = service.get_session(session_id)
    accepted = session.select_pickup_date(data.selectedDate)
    return _session_response(session, accepted)


@router.post("/sessions/{session_id}/pickup-slot", response_model=SessionResponse)
async def select_pickup_slot(
    session_id: str,
    data: SlotSelection,
    service: SchedulingService = Depends(get_scheduling_service),
):
    session = service.get_session(session_id)
    accepted = session.select_pickup_slot(data.slotId)
    return _session_response(session, accepted)


@router.post("/sessions/{session_id}/delivery-date", response_model=SessionResponse)
async def select_delivery_date(
    session_id: str,
    data: DateSelection,
    service: SchedulingService = Depends(get_scheduling_service),
):
    session = service.get_session(session_id)
    accepted = session.select_delivery_date(data.selectedDate)
    return _session_response(session, accepted)


@router.post("/sessions/{session_id}/delivery-slot", response_model=SessionResponse)
async def select_delivery_slot(
    session_id: str,
    data: SlotSelection,
    service: SchedulingService = Depends(get_scheduling_service),
):
    session = service.get_session(session_id)
    accepted = session.select_delivery_slot(data.slotId)
    return _session_response(session, accepted)


@router.post("/sessions/{session_id}/continue", response_model=ContinueResponse)
async def continue_to_confirmation(
    session_id: str, service: SchedulingService = Depends(get_scheduling_service)
):
    """Validation gate before order confirmation; returns the order scheduling fields when complete"""
    session = service.get_session(session_id)
    errors = session.check_continue()
    order = None if errors else session.order_payload()
    return ContinueResponse(
        sessionId=session.session_id,
        isComplete=not errors,
        errors=errors,
        notifications=session.notifier.drain(),
        order=order,
    )
