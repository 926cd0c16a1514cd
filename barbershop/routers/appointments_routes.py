# barbershop/routers/appointments_routes.py

from datetime import date, datetime

from fastapi import APIRouter, BackgroundTasks, Depends

from barbershop.availability import available_times, drop_elapsed_slots
from barbershop.deps import get_manager, get_store
from barbershop.lifecycle import AppointmentManager
from barbershop.schemas import (
    AppointmentCreate,
    AvailabilityResponse,
    BookingResponse,
    ServiceListResponse,
    WorkListResponse,
)
from barbershop.store import EntityType, RecordStore

router = APIRouter(
    prefix="/api/appointments",
    tags=["appointments"],
)


@router.post("/book", response_model=BookingResponse)
def book_appointment(
    appt: AppointmentCreate,
    background_tasks: BackgroundTasks,
    manager: AppointmentManager = Depends(get_manager),
):
    # saving and the confirmation email run after the response is sent
    booked = manager.book(appt, schedule=background_tasks.add_task)
    return {
        "success": True,
        "message": "Appointment booked successfully!",
        "appointment": booked,
    }


@router.get("/available-times", response_model=AvailabilityResponse)
def get_available_times(
    date: date,
    store: RecordStore = Depends(get_store),
):
    times = available_times(store, date)
    times = drop_elapsed_slots(times, date, datetime.now())
    return {"success": True, "date": date, "availableTimes": times}


@router.get("/services", response_model=ServiceListResponse)
def public_services(store: RecordStore = Depends(get_store)):
    services = [s for s in store.list(EntityType.services) if s.active]
    return {"success": True, "services": services}


@router.get("/work", response_model=WorkListResponse)
def public_work(store: RecordStore = Depends(get_store)):
    items = [w for w in store.list(EntityType.work) if w.active]
    # items without an explicit order go last
    items.sort(key=lambda w: (w.order is None, w.order or 0))
    return {"success": True, "work": items}
