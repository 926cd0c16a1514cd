from datetime import date, datetime

from barbershop.availability import (
    SLOT_UNIVERSE,
    available_times,
    build_slot_universe,
    drop_elapsed_slots,
    to_iso_date,
)
from barbershop.models import Appointment
from barbershop.store import EntityType


def add_appointment(store, on, at, status="confirmed", name="Client"):
    store.append(EntityType.appointments, Appointment(
        name=name, phone="5551234567", email="c@x.com", service="Haircut",
        date=on, time=at, status=status,
    ))


def test_slot_universe_is_21_half_hour_slots():
    assert len(SLOT_UNIVERSE) == 21
    assert SLOT_UNIVERSE[0] == "09:00"
    assert SLOT_UNIVERSE[1] == "09:30"
    assert SLOT_UNIVERSE[-1] == "19:00"
    assert list(SLOT_UNIVERSE) == sorted(SLOT_UNIVERSE)


def test_build_slot_universe_custom_range():
    assert build_slot_universe("10:00", "11:00", 20) == ("10:00", "10:20", "10:40", "11:00")


def test_no_appointments_returns_every_slot(sheet_store):
    assert available_times(sheet_store, date(2025, 3, 10)) == list(SLOT_UNIVERSE)


def test_single_booking_removed_and_order_kept(sheet_store):
    add_appointment(sheet_store, "2025-03-10", "10:00")
    times = available_times(sheet_store, date(2025, 3, 10))
    assert len(times) == 20
    assert "10:00" not in times
    assert times == [t for t in SLOT_UNIVERSE if t != "10:00"]


def test_only_confirmed_appointments_block_a_slot(sheet_store):
    add_appointment(sheet_store, "2025-03-10", "09:00", status="confirmed")
    add_appointment(sheet_store, "2025-03-10", "09:30", status="pending")
    add_appointment(sheet_store, "2025-03-10", "10:00", status="cancelled")
    add_appointment(sheet_store, "2025-03-10", "10:30", status="completed")
    times = available_times(sheet_store, date(2025, 3, 10))
    assert "09:00" not in times
    assert {"09:30", "10:00", "10:30"} <= set(times)


def test_other_dates_do_not_block(sheet_store):
    add_appointment(sheet_store, "2025-03-11", "10:00")
    assert "10:00" in available_times(sheet_store, date(2025, 3, 10))


def test_day_first_dates_in_sheet_are_matched(sheet_store):
    add_appointment(sheet_store, "10/3/2025", "11:00")
    assert "11:00" not in available_times(sheet_store, date(2025, 3, 10))


def test_unconfigured_store_returns_every_slot(local_store):
    add_appointment(local_store, "2025-03-10", "10:00")
    assert available_times(local_store, date(2025, 3, 10)) == list(SLOT_UNIVERSE)


def test_unreachable_sheet_returns_every_slot(sheet_store, fake_sheets):
    add_appointment(sheet_store, "2025-03-10", "10:00")
    fake_sheets.fail = True
    assert available_times(sheet_store, date(2025, 3, 10)) == list(SLOT_UNIVERSE)


def test_drop_elapsed_slots_today():
    now = datetime(2025, 3, 10, 12, 15)
    times = drop_elapsed_slots(list(SLOT_UNIVERSE), date(2025, 3, 10), now)
    assert times[0] == "12:30"
    assert "12:00" not in times


def test_drop_elapsed_slots_keeps_exact_current_slot():
    now = datetime(2025, 3, 10, 12, 0)
    assert drop_elapsed_slots(["11:30", "12:00", "12:30"], date(2025, 3, 10), now) == ["12:00", "12:30"]


def test_drop_elapsed_slots_other_day_untouched():
    now = datetime(2025, 3, 10, 18, 0)
    assert drop_elapsed_slots(list(SLOT_UNIVERSE), date(2025, 3, 11), now) == list(SLOT_UNIVERSE)


def test_to_iso_date():
    assert to_iso_date("2025-03-10") == "2025-03-10"
    assert to_iso_date("2025-03-10T09:00:00Z") == "2025-03-10"
    assert to_iso_date("1/2/2025") == "2025-02-01"
    assert to_iso_date("") is None
    assert to_iso_date("next tuesday") is None
