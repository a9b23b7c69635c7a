#!/usr/bin/env python3
"""
Script to insert the default pickup/delivery windows into the time_slots table
Usage: python seed_time_slots.py
"""

import logging
from datetime import datetime

from app.cache import invalidate_slot_catalogue_cache
from app.database import Base, SessionLocal, engine
from app.models import TimeSlot

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

# (start, end, enabled for same-day pickup)
DEFAULT_WINDOWS = [
    ("09:00", "11:00", True),
    ("11:00", "13:00", True),
    ("13:00", "15:00", True),
    ("15:00", "17:00", True),
    ("17:00", "19:00", False),
    ("19:00", "21:00", False),
]


def format_slot_label(start_time: str, end_time: str) -> str:
    """'09:00', '11:00' -> '9:00 AM - 11:00 AM'"""

    def _fmt(value: str) -> str:
        return datetime.strptime(value, "%H:%M").strftime("%I:%M %p").lstrip("0")

    return f"{_fmt(start_time)} - {_fmt(end_time)}"


def seed_time_slots(db, windows=DEFAULT_WINDOWS) -> int:
    """Insert windows that are missing (matched on start/end time); returns the number inserted"""
    inserted = 0
    for start_time, end_time, enabled in windows:
        existing = (
            db.query(TimeSlot)
            .filter(TimeSlot.start_time == start_time, TimeSlot.end_time == end_time)
            .first()
        )
        if existing:
            logger.info(f"   ⏭️  {existing.label} already exists")
            continue

        slot = TimeSlot(
            label=format_slot_label(start_time, end_time),
            start_time=start_time,
            end_time=end_time,
            enabled=enabled,
        )
        db.add(slot)
        inserted += 1
        logger.info(f"   ✅ Added {slot.label} (same-day: {'yes' if enabled else 'no'})")

    db.commit()
    return inserted


def main():
    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()
    try:
        logger.info("🔍 Seeding time slots...\n")
        inserted = seed_time_slots(db)
        if inserted:
            invalidate_slot_catalogue_cache()
        logger.info(f"\n✅ Seeding complete: {inserted} slot(s) inserted")
    except Exception as e:
        logger.error(f"❌ Seeding failed: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
