# barbershop/lifecycle.py

import logging
import time
from datetime import datetime
from typing import Callable, Optional, Set

from .availability import to_iso_date
from .models import Appointment
from .notifications import EmailNotifier
from .schemas import AppointmentCreate, AppointmentPublic, AppointmentStatus
from .store import EntityType, RecordStore, new_record_id, utc_timestamp
from .tasks import RetryRunner

logger = logging.getLogger(__name__)

# completed and cancelled are terminal
TRANSITIONS = {
    AppointmentStatus.pending: {AppointmentStatus.confirmed, AppointmentStatus.cancelled, AppointmentStatus.completed},
    AppointmentStatus.confirmed: {AppointmentStatus.completed, AppointmentStatus.cancelled},
    AppointmentStatus.completed: set(),
    AppointmentStatus.cancelled: set(),
}


class InvalidTransition(Exception):
    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot move appointment from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


def can_transition(current: str, requested: str) -> bool:
    try:
        current_status = AppointmentStatus(current)
        requested_status = AppointmentStatus(requested)
    except ValueError:
        return False
    return requested_status in TRANSITIONS[current_status]


def appointment_start(appointment: Appointment) -> Optional[datetime]:
    iso_date = to_iso_date(appointment.date)
    if not iso_date:
        return None
    hhmm = (appointment.time or "00:00").strip()[:5] or "00:00"
    try:
        return datetime.strptime(f"{iso_date} {hhmm}", "%Y-%m-%d %H:%M")
    except ValueError:
        return datetime.strptime(iso_date, "%Y-%m-%d")


def is_past(appointment: Appointment, now: datetime) -> bool:
    start = appointment_start(appointment)
    return start is not None and start < now


def run_inline(func: Callable, *args, **kwargs) -> None:
    func(*args, **kwargs)


class AppointmentManager:
    def __init__(
        self,
        store: RecordStore,
        notifier: EmailNotifier,
        runner: RetryRunner,
        default_barber: str = "default_barber",
        reconcile_delay: float = 0.2,
        strict_transitions: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.notifier = notifier
        self.runner = runner
        self.default_barber = default_barber
        self.reconcile_delay = reconcile_delay
        self.strict_transitions = strict_transitions
        self.sleep = sleep

    def book(
        self,
        data: AppointmentCreate,
        schedule: Callable = run_inline,
        status: AppointmentStatus = AppointmentStatus.confirmed,
    ) -> AppointmentPublic:
        """Accept a validated booking and return it right away.

        Persisting the record and emailing the customer are handed to
        ``schedule`` (FastAPI's ``BackgroundTasks.add_task`` from the HTTP
        layer). Their failures never reach the caller. No slot check happens
        here: two bookings for the same slot made before either is written
        are both accepted.
        """
        fields = dict(
            id=new_record_id(),
            name=data.name,
            email=data.email,
            phone=data.phone,
            service=data.service,
            barber=self.default_barber,
            date=data.date.isoformat(),
            time=data.time,
            notes=data.notes,
            status=status.value,
            created_at=utc_timestamp(),
        )
        appointment = Appointment(**fields)
        booked = AppointmentPublic(**fields)
        logger.info(f"Booking accepted: {appointment.id} on {appointment.date} at {appointment.time}")

        schedule(
            self.runner.run,
            f"Saving appointment {appointment.id}",
            self.store.append,
            EntityType.appointments,
            appointment,
        )
        schedule(
            self.runner.run,
            f"Confirmation email for appointment {appointment.id}",
            self.notifier.send_booking_confirmation,
            booked,
        )
        return booked

    def set_status(self, appointment_id: str, new_status: AppointmentStatus) -> bool:
        new_status = AppointmentStatus(new_status)
        if self.strict_transitions:
            current = self.store.get(EntityType.appointments, appointment_id)
            if current is None:
                return False
            if not can_transition(current.status, new_status.value):
                raise InvalidTransition(current.status, new_status.value)

        updated = self.store.update_by_id(EntityType.appointments, appointment_id, {"status": new_status.value})
        if updated:
            logger.info(f"Appointment {appointment_id} status set to {new_status.value}")
        return updated

    def delete(self, appointment_id: str) -> bool:
        deleted = self.store.delete_by_id(EntityType.appointments, appointment_id)
        if deleted:
            logger.info(f"Appointment {appointment_id} deleted")
        return deleted

    def reconcile_past(self, now: Optional[datetime] = None) -> Set[str]:
        """Mark pending/confirmed appointments that already started as completed.

        Writes go out one at a time with a short pause to stay under the
        Sheets API quota. A failing row is logged and skipped.
        """
        now = now or datetime.now()
        due = [
            a for a in self.store.list(EntityType.appointments)
            if can_transition(a.status, AppointmentStatus.completed.value) and is_past(a, now)
        ]
        if not due:
            return set()

        updated_ids = set()
        for appointment in due:
            if not appointment.id:
                logger.warning(f"Skipping past appointment without id ({appointment.date} {appointment.time})")
                continue
            try:
                if self.store.update_by_id(
                    EntityType.appointments, appointment.id, {"status": AppointmentStatus.completed.value}
                ):
                    updated_ids.add(appointment.id)
                    self.sleep(self.reconcile_delay)
                else:
                    logger.warning(f"Could not complete past appointment {appointment.id}")
            except Exception as e:
                logger.error(f"Error completing past appointment {appointment.id}: {e}")

        logger.info(f"Reconciliation completed {len(updated_ids)} of {len(due)} past appointments")
        return updated_ids

    def repair_missing_ids(self) -> int:
        updated = self.store.repair_missing_ids(EntityType.appointments)
        logger.info(f"Assigned ids to {updated} appointments")
        return updated
