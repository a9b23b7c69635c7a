import uuid

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.sql import func

from .database import Base


def generate_slot_id():
    """Generate an opaque slot identifier"""
    return str(uuid.uuid4())


class TimeSlot(Base):
    """A fixed daily pickup/delivery window offered by the business"""

    __tablename__ = "time_slots"

    id = Column(String(36), primary_key=True, default=generate_slot_id)
    label = Column(String(100), nullable=False)  # e.g. "9:00 AM - 11:00 AM"
    start_time = Column(String(8), nullable=False, index=True)  # 24-hour HH:MM
    end_time = Column(String(8), nullable=False)
    # Only governs same-day pickup; future dates offer every slot
    enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
