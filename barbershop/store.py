# barbershop/store.py

import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from sqlmodel import SQLModel, select

from .config import Settings
from .db import LocalStore
from .models import Appointment, Message, Service, WorkItem
from .sheets import SheetsClient, SheetsError

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A write that has no local fallback failed against the spreadsheet."""


class EntityType(str, Enum):
    appointments = "appointments"
    services = "services"
    work = "work"
    messages = "messages"


# Remote failures on these degrade to local memory instead of raising
LOCAL_FALLBACK = {EntityType.appointments, EntityType.messages}
# Ids are max(existing) + 1 for these, timestamp based for the rest
SEQUENTIAL_IDS = {EntityType.services, EntityType.work}


def new_record_id() -> str:
    return f"{int(time.time() * 1000)}-{secrets.token_hex(3)}"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _text(value: str, default: str = "") -> str:
    return value if value else default


def _int_or_none(value: str) -> Optional[int]:
    try:
        return int(float(value)) if value else None
    except ValueError:
        return None


def _float_or_none(value: str) -> Optional[float]:
    try:
        return float(value) if value else None
    except ValueError:
        return None


def _flag(default: bool) -> Callable[[str], bool]:
    def parse(value: str) -> bool:
        if not value:
            return default
        return value.strip().lower() == "true"
    return parse


def to_cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class Column:
    attr: str
    header: str
    parse: Callable[[str], object] = _text


@dataclass(frozen=True)
class SheetLayout:
    tab: str
    columns: tuple

    @property
    def last_column(self) -> str:
        return chr(ord("A") + len(self.columns) - 1)

    @property
    def full_range(self) -> str:
        return f"{self.tab}!A:{self.last_column}"

    def row_range(self, row_number: int) -> str:
        return f"{self.tab}!A{row_number}:{self.last_column}{row_number}"

    def has_column(self, attr: str) -> bool:
        return any(c.attr == attr for c in self.columns)

    def cell(self, attr: str, row_number: int) -> str:
        letter = chr(ord("A") + [c.attr for c in self.columns].index(attr))
        return f"{self.tab}!{letter}{row_number}"

    def id_cell(self, row_number: int) -> str:
        return self.cell("id", row_number)

    @property
    def headers(self) -> list:
        return [c.header for c in self.columns]

    def to_row(self, record: SQLModel) -> list:
        return [to_cell(getattr(record, c.attr)) for c in self.columns]

    def from_row(self, model: type, row: list) -> SQLModel:
        cells = [str(v).strip() if v is not None else "" for v in row]
        cells += [""] * (len(self.columns) - len(cells))
        return model(**{c.attr: c.parse(cells[i]) for i, c in enumerate(self.columns)})


def is_blank(row: list) -> bool:
    return not any(str(v or "").strip() for v in row)


def build_layouts(settings: Settings) -> dict:
    return {
        EntityType.appointments: SheetLayout(settings.appointments_sheet, (
            Column("id", "id"),
            Column("name", "name"),
            Column("phone", "phone"),
            Column("email", "email"),
            Column("service", "service"),
            Column("barber", "barber"),
            Column("date", "date"),
            Column("time", "time"),
            Column("notes", "notes"),
            Column("status", "status", lambda v: _text(v, "confirmed")),
            Column("created_at", "createdAt"),
        )),
        EntityType.messages: SheetLayout(settings.messages_sheet, (
            Column("id", "id"),
            Column("name", "name"),
            Column("email", "email"),
            Column("phone", "phone"),
            Column("message", "message"),
            Column("created_at", "createdAt"),
            Column("handled", "handled", _flag(False)),
        )),
        EntityType.services: SheetLayout(settings.services_sheet, (
            Column("id", "id"),
            Column("name", "name"),
            Column("description", "description"),
            Column("duration", "duration", _int_or_none),
            Column("price", "price", _float_or_none),
            Column("category", "category"),
            Column("active", "active", _flag(True)),
        )),
        EntityType.work: SheetLayout(settings.work_sheet, (
            Column("id", "id"),
            Column("title", "title"),
            Column("description", "description"),
            Column("category", "category"),
            Column("image_url", "image_url"),
            Column("active", "active", _flag(True)),
            Column("order", "order", _int_or_none),
        )),
    }


MODELS = {
    EntityType.appointments: Appointment,
    EntityType.services: Service,
    EntityType.work: WorkItem,
    EntityType.messages: Message,
}


class RecordStore:
    def __init__(self, local: LocalStore, sheets: Optional[SheetsClient], settings: Settings):
        self.local = local
        self.sheets = sheets
        self.layouts = build_layouts(settings)

    @property
    def remote_configured(self) -> bool:
        return self.sheets is not None

    # ---- remote helpers ----

    def _remote_grid(self, entity: EntityType) -> list:
        return self.sheets.get_values(self.layouts[entity].full_range)

    def _remote_records(self, entity: EntityType) -> list:
        layout = self.layouts[entity]
        rows = self._remote_grid(entity)[1:]  # skip header
        return [layout.from_row(MODELS[entity], row) for row in rows if not is_blank(row)]

    def _locate(self, entity: EntityType, record_id: str):
        """Return (sheet row number, record) for an id, or (None, None)."""
        if not record_id:
            return None, None
        layout = self.layouts[entity]
        grid = self._remote_grid(entity)
        for offset, row in enumerate(grid[1:]):
            if row and str(row[0] or "").strip() == record_id:
                # +2: header row and 1-based sheet numbering
                return offset + 2, layout.from_row(MODELS[entity], row)
        return None, None

    # ---- local helpers ----

    def _local_get(self, session, entity: EntityType, record_id: str):
        model = MODELS[entity]
        return session.exec(select(model).where(model.id == record_id)).first()

    def _local_append(self, entity: EntityType, record: SQLModel) -> SQLModel:
        with self.local.session() as session:
            session.add(record)
            session.commit()
            session.refresh(record)
        return record

    def _local_list(self, entity: EntityType) -> list:
        model = MODELS[entity]
        with self.local.session() as session:
            return list(session.exec(select(model).order_by(model.row_id)).all())

    # ---- public contract ----

    def next_id(self, entity: EntityType) -> str:
        if entity not in SEQUENTIAL_IDS:
            return new_record_id()
        if not self.remote_configured:
            records = self._local_list(entity)
        else:
            try:
                records = self._remote_records(entity)
            except SheetsError as e:
                logger.error(f"Error reading {entity.value} ids: {e}")
                raise StoreError(f"Could not read {entity.value} ids") from e

        max_id = 0
        for record in records:
            try:
                max_id = max(max_id, int(record.id))
            except (TypeError, ValueError):
                continue
        return str(max_id + 1)

    def append(self, entity: EntityType, record: SQLModel) -> SQLModel:
        if not record.id:
            record.id = self.next_id(entity)

        if not self.remote_configured:
            logger.info(f"Google Sheets not configured, {entity.value} record {record.id} saved locally")
            return self._local_append(entity, record)

        layout = self.layouts[entity]
        try:
            self.sheets.append_values(layout.full_range, [layout.to_row(record)])
        except SheetsError as e:
            if entity in LOCAL_FALLBACK:
                logger.error(f"Google Sheets API error, {entity.value} record {record.id} saved locally: {e}")
                return self._local_append(entity, record)
            logger.error(f"Error adding {entity.value} record: {e}")
            raise StoreError(f"Could not add {entity.value} record") from e
        return record

    def list(self, entity: EntityType) -> list:
        if not self.remote_configured:
            return self._local_list(entity)

        try:
            remote = self._remote_records(entity)
        except SheetsError as e:
            logger.error(f"Google Sheets API error while listing {entity.value}: {e}")
            remote = []

        if entity == EntityType.messages:
            # local messages are genuine fallbacks written while the sheet was down
            return remote + self._local_list(entity)
        return remote

    def get(self, entity: EntityType, record_id: str) -> Optional[SQLModel]:
        if not self.remote_configured:
            with self.local.session() as session:
                return self._local_get(session, entity, record_id)
        try:
            _, record = self._locate(entity, record_id)
        except SheetsError as e:
            logger.error(f"Google Sheets API error while reading {entity.value} {record_id}: {e}")
            return None
        return record

    def update_by_id(self, entity: EntityType, record_id: str, patch: dict) -> bool:
        if not record_id:
            return False
        changes = {k: v for k, v in patch.items() if k not in ("id", "row_id")}

        if not self.remote_configured:
            with self.local.session() as session:
                record = self._local_get(session, entity, record_id)
                if record is None:
                    logger.info(f"{entity.value} record {record_id} not found")
                    return False
                for key, value in changes.items():
                    setattr(record, key, value)
                session.add(record)
                session.commit()
            return True

        layout = self.layouts[entity]
        try:
            row_number, _ = self._locate(entity, record_id)
            if row_number is None:
                logger.info(f"{entity.value} record {record_id} not found")
                return False
            # only the patched cells are written, the rest of the row keeps its text
            for key, value in changes.items():
                if layout.has_column(key):
                    self.sheets.update_values(layout.cell(key, row_number), [[to_cell(value)]])
        except SheetsError as e:
            if entity in LOCAL_FALLBACK:
                logger.error(f"Error updating {entity.value} record {record_id}: {e}")
                return False
            raise StoreError(f"Could not update {entity.value} record {record_id}") from e
        return True

    def delete_by_id(self, entity: EntityType, record_id: str) -> bool:
        if not record_id:
            return False
        deleted_locally = False
        with self.local.session() as session:
            record = self._local_get(session, entity, record_id)
            if record is not None:
                session.delete(record)
                session.commit()
                deleted_locally = True

        if not self.remote_configured:
            if not deleted_locally:
                logger.info(f"{entity.value} record {record_id} not found")
            return deleted_locally

        layout = self.layouts[entity]
        try:
            row_number, _ = self._locate(entity, record_id)
            if row_number is None:
                if not deleted_locally:
                    logger.info(f"{entity.value} record {record_id} not found")
                return deleted_locally
            # clear, not delete: row positions of the other records stay put
            self.sheets.clear_values(layout.row_range(row_number))
        except SheetsError as e:
            if entity in LOCAL_FALLBACK:
                logger.error(f"Error deleting {entity.value} record {record_id}: {e}")
                return deleted_locally
            raise StoreError(f"Could not delete {entity.value} record {record_id}") from e
        return True

    def repair_missing_ids(self, entity: EntityType = EntityType.appointments) -> int:
        updated = 0
        if not self.remote_configured:
            with self.local.session() as session:
                model = MODELS[entity]
                for record in session.exec(select(model).where(model.id == "")).all():
                    record.id = new_record_id()
                    session.add(record)
                    updated += 1
                session.commit()
            return updated

        layout = self.layouts[entity]
        try:
            grid = self._remote_grid(entity)
            for offset, row in enumerate(grid[1:]):
                if is_blank(row) or str(row[0] or "").strip():
                    continue
                self.sheets.update_values(layout.id_cell(offset + 2), [[new_record_id()]])
                updated += 1
        except SheetsError as e:
            logger.error(f"Error ensuring {entity.value} ids after {updated} updates: {e}")
            raise StoreError(f"Could not repair {entity.value} ids") from e
        return updated

    def ensure_headers(self) -> None:
        if not self.remote_configured:
            return
        for entity, layout in self.layouts.items():
            header_range = layout.row_range(1)
            try:
                if not self.sheets.get_values(header_range):
                    self.sheets.update_values(header_range, [layout.headers])
                    logger.info(f"Wrote header row to sheet tab '{layout.tab}'")
            except SheetsError as e:
                logger.warning(f"Could not check header row of sheet tab '{layout.tab}': {e}")
