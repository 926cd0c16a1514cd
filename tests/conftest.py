import re

import pytest
from fastapi.testclient import TestClient

from barbershop.config import Settings
from barbershop.db import LocalStore
from barbershop.lifecycle import AppointmentManager
from barbershop.main import create_app
from barbershop.sheets import SheetsError
from barbershop.store import RecordStore, build_layouts
from barbershop.tasks import RetryRunner

A1_RE = re.compile(r"^(?P<tab>[^!]+)!(?P<col>[A-Z])(?P<start>\d*)(?::[A-Z]+(?P<end>\d*))?$")

ADMIN_EMAIL = "admin@barbershop.test"
ADMIN_PASSWORD = "s3cret-pass"


class FakeSheets:
    """In-memory spreadsheet with the same four calls as SheetsClient."""

    def __init__(self):
        self.tabs = {}
        self.fail = False
        self.fail_on = set()
        self.calls = []

    def seed(self, tab, rows):
        self.tabs[tab] = [list(r) for r in rows]

    def rows(self, tab):
        return self.tabs.get(tab, [])

    def _check(self, op, cell_range):
        self.calls.append((op, cell_range))
        if self.fail or op in self.fail_on:
            raise SheetsError("spreadsheet unavailable")

    def _parse(self, cell_range):
        match = A1_RE.match(cell_range)
        assert match, f"unexpected range {cell_range}"
        start = match.group("start")
        return match.group("tab"), int(start) if start else None, ord(match.group("col")) - ord("A")

    def get_values(self, cell_range):
        self._check("get", cell_range)
        tab, row, col = self._parse(cell_range)
        grid = self.tabs.get(tab, [])
        if row is None:
            values = [list(r) for r in grid]
            while values and not any(values[-1]):
                values.pop()
            return values
        if row <= len(grid) and any(grid[row - 1]):
            return [list(grid[row - 1])]
        return []

    def append_values(self, cell_range, rows):
        self._check("append", cell_range)
        tab, _, _ = self._parse(cell_range)
        grid = self.tabs.setdefault(tab, [])
        while grid and not any(grid[-1]):
            grid.pop()
        grid.extend(list(r) for r in rows)

    def update_values(self, cell_range, rows):
        self._check("update", cell_range)
        tab, row, col = self._parse(cell_range)
        grid = self.tabs.setdefault(tab, [])
        while len(grid) < row:
            grid.append([])
        current = grid[row - 1]
        current += [""] * (col - len(current))
        new = list(rows[0])
        grid[row - 1] = current[:col] + new + current[col + len(new):]

    def clear_values(self, cell_range):
        self._check("clear", cell_range)
        tab, row, col = self._parse(cell_range)
        grid = self.tabs.get(tab, [])
        if row and row <= len(grid):
            grid[row - 1] = [""] * len(grid[row - 1])


class RecordingNotifier:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def send_booking_confirmation(self, appointment):
        if self.fail:
            raise ConnectionError("smtp down")
        self.sent.append(appointment)

    def send_contact_notification(self, contact):
        if self.fail:
            raise ConnectionError("smtp down")
        self.sent.append(contact)


def no_sleep(seconds):
    pass


@pytest.fixture
def settings(tmp_path):
    return Settings(
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        jwt_secret="test-secret",
        upload_dir=str(tmp_path / "uploads"),
        reconcile_delay_seconds=0,
        task_retry_attempts=2,
        task_retry_delay_seconds=0,
    )


@pytest.fixture
def fake_sheets(settings):
    sheets = FakeSheets()
    for layout in build_layouts(settings).values():
        sheets.seed(layout.tab, [layout.headers])
    return sheets


@pytest.fixture
def local_store(settings):
    return RecordStore(LocalStore(), None, settings)


@pytest.fixture
def sheet_store(settings, fake_sheets):
    return RecordStore(LocalStore(), fake_sheets, settings)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def runner():
    return RetryRunner(attempts=2, delay=0, sleep=no_sleep)


@pytest.fixture
def manager(sheet_store, notifier, runner):
    return AppointmentManager(sheet_store, notifier, runner, reconcile_delay=0, sleep=no_sleep)


@pytest.fixture
def local_manager(local_store, notifier, runner):
    return AppointmentManager(local_store, notifier, runner, reconcile_delay=0, sleep=no_sleep)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def sheet_client(settings, fake_sheets):
    with TestClient(create_app(settings, sheets_client=fake_sheets)) as c:
        yield c


def login(client):
    response = client.post("/api/admin/login", json={"username": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def admin_headers(client):
    return login(client)


@pytest.fixture
def sheet_admin_headers(sheet_client):
    return login(sheet_client)
