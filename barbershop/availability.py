# barbershop/availability.py

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from .schemas import AppointmentStatus
from .store import EntityType, RecordStore

logger = logging.getLogger(__name__)

OPEN_TIME = "09:00"
LAST_SLOT = "19:00"
SLOT_MINUTES = 30


def build_slot_universe(first: str = OPEN_TIME, last: str = LAST_SLOT, step: int = SLOT_MINUTES) -> tuple:
    current = datetime.strptime(first, "%H:%M")
    end = datetime.strptime(last, "%H:%M")
    slots = []
    while current <= end:
        slots.append(current.strftime("%H:%M"))
        current += timedelta(minutes=step)
    return tuple(slots)


# 09:00, 09:30, ... 19:00 -- the same for every date and every service
SLOT_UNIVERSE = build_slot_universe()


def to_iso_date(value: str) -> Optional[str]:
    """Normalise a stored appointment date to YYYY-MM-DD.

    Sheet rows typed by hand may hold D/M/YYYY instead of ISO dates.
    """
    value = (value or "").strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10]).isoformat()
    except ValueError:
        pass
    try:
        return datetime.strptime(value, "%d/%m/%Y").date().isoformat()
    except ValueError:
        return None


def available_times(store: RecordStore, on_date: date) -> List[str]:
    if not store.remote_configured:
        # nothing persisted to exclude
        logger.info("Google Sheets not configured, returning all available times")
        return list(SLOT_UNIVERSE)

    wanted = on_date.isoformat()
    try:
        appointments = store.list(EntityType.appointments)
    except Exception as e:
        logger.error(f"Error fetching available times: {e}")
        return list(SLOT_UNIVERSE)

    booked = {
        a.time
        for a in appointments
        if a.status == AppointmentStatus.confirmed.value and to_iso_date(a.date) == wanted
    }
    return [slot for slot in SLOT_UNIVERSE if slot not in booked]


def drop_elapsed_slots(times: List[str], on_date: date, now: datetime) -> List[str]:
    """Remove today's slots that are earlier than the current wall-clock time."""
    if on_date != now.date():
        return list(times)
    current = now.strftime("%H:%M")
    return [t for t in times if t >= current]
