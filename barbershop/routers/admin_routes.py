# barbershop/routers/admin_routes.py

import base64
import binascii
import logging
import re
import time
from pathlib import Path

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request

from barbershop.auth import ADMIN_ROLE, authenticate_admin, create_access_token, get_settings
from barbershop.config import Settings
from barbershop.deps import get_manager, get_runner, get_store, require_admin
from barbershop.lifecycle import AppointmentManager
from barbershop.models import Service, WorkItem
from barbershop.schemas import (
    AppointmentListResponse,
    ImageUpload,
    LoginRequest,
    MessageListResponse,
    MigrateIdsResponse,
    ReconcileResponse,
    ServiceCreatedResponse,
    ServiceIn,
    ServiceListResponse,
    StatusUpdate,
    SuccessResponse,
    Token,
    UploadResponse,
    WorkCreatedResponse,
    WorkIn,
    WorkListResponse,
)
from barbershop.store import EntityType, RecordStore
from barbershop.tasks import RetryRunner

logger = logging.getLogger(__name__)

DATA_URL_RE = re.compile(r"^data:(.+);base64,(.*)$", re.DOTALL)

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
)


@router.post("/login", response_model=Token)
def login(
    credentials: LoginRequest,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    manager: AppointmentManager = Depends(get_manager),
    runner: RetryRunner = Depends(get_runner),
):
    if not authenticate_admin(credentials.username, credentials.password, settings):
        logger.warning("Failed admin login attempt")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": credentials.username, "role": ADMIN_ROLE}, settings)
    background_tasks.add_task(runner.run, "Reconciliation sweep after login", manager.reconcile_past)
    return {"success": True, "token": token, "message": "Login successful"}


# ---- appointments ----

@router.get("/appointments", response_model=AppointmentListResponse)
def list_appointments(
    _admin: dict = Depends(require_admin),
    store: RecordStore = Depends(get_store),
    manager: AppointmentManager = Depends(get_manager),
):
    manager.reconcile_past()
    return {"success": True, "appointments": store.list(EntityType.appointments)}


@router.post("/appointments/reconcile", response_model=ReconcileResponse)
def reconcile_appointments(
    _admin: dict = Depends(require_admin),
    manager: AppointmentManager = Depends(get_manager),
):
    updated = manager.reconcile_past()
    return {"success": True, "updated": sorted(updated)}


@router.post("/appointments/migrate-ids", response_model=MigrateIdsResponse)
def migrate_appointment_ids(
    _admin: dict = Depends(require_admin),
    manager: AppointmentManager = Depends(get_manager),
):
    return {"success": True, "updated": manager.repair_missing_ids()}


@router.put("/appointments/{appointment_id}/status", response_model=SuccessResponse)
def update_appointment_status(
    appointment_id: str,
    body: StatusUpdate,
    _admin: dict = Depends(require_admin),
    manager: AppointmentManager = Depends(get_manager),
):
    if not manager.set_status(appointment_id, body.status):
        raise HTTPException(status_code=404, detail="Appointment not found")
    return {"success": True, "message": "Appointment status updated"}


@router.delete("/appointments/{appointment_id}", response_model=SuccessResponse)
def delete_appointment(
    appointment_id: str,
    _admin: dict = Depends(require_admin),
    manager: AppointmentManager = Depends(get_manager),
):
    if not manager.delete(appointment_id):
        raise HTTPException(status_code=404, detail="Appointment not found")
    return {"success": True, "message": "Appointment deleted"}


# ---- messages ----

@router.get("/messages", response_model=MessageListResponse)
def list_messages(
    _admin: dict = Depends(require_admin),
    store: RecordStore = Depends(get_store),
):
    return {"success": True, "messages": store.list(EntityType.messages)}


# ---- services ----

@router.get("/services", response_model=ServiceListResponse)
def list_services(
    _admin: dict = Depends(require_admin),
    store: RecordStore = Depends(get_store),
):
    return {"success": True, "services": store.list(EntityType.services)}


@router.post("/services", response_model=ServiceCreatedResponse, status_code=201)
def create_service(
    service: ServiceIn,
    _admin: dict = Depends(require_admin),
    store: RecordStore = Depends(get_store),
):
    db_service = Service(
        name=service.name or "",
        description=service.description or "",
        duration=service.duration,
        price=service.price,
        category=service.category or "",
        active=service.active is not False,
    )
    created = store.append(EntityType.services, db_service)
    return {"success": True, "service": created}


@router.put("/services/{service_id}", response_model=SuccessResponse)
def update_service(
    service_id: str,
    service: ServiceIn,
    _admin: dict = Depends(require_admin),
    store: RecordStore = Depends(get_store),
):
    patch = service.model_dump(exclude_unset=True, exclude_none=True)
    if not store.update_by_id(EntityType.services, service_id, patch):
        raise HTTPException(status_code=404, detail="Service not found")
    return {"success": True}


@router.delete("/services/{service_id}", response_model=SuccessResponse)
def delete_service(
    service_id: str,
    _admin: dict = Depends(require_admin),
    store: RecordStore = Depends(get_store),
):
    if not store.delete_by_id(EntityType.services, service_id):
        raise HTTPException(status_code=404, detail="Service not found")
    return {"success": True}


# ---- portfolio ----

@router.get("/work", response_model=WorkListResponse)
def list_work(
    _admin: dict = Depends(require_admin),
    store: RecordStore = Depends(get_store),
):
    return {"success": True, "work": store.list(EntityType.work)}


@router.post("/work", response_model=WorkCreatedResponse, status_code=201)
def create_work(
    item: WorkIn,
    _admin: dict = Depends(require_admin),
    store: RecordStore = Depends(get_store),
):
    db_item = WorkItem(
        title=item.title or "",
        description=item.description or "",
        category=item.category or "",
        image_url=item.image_url or "",
        active=item.active is not False,
        order=item.order,
    )
    created = store.append(EntityType.work, db_item)
    return {"success": True, "item": created}


@router.put("/work/{item_id}", response_model=SuccessResponse)
def update_work(
    item_id: str,
    item: WorkIn,
    _admin: dict = Depends(require_admin),
    store: RecordStore = Depends(get_store),
):
    patch = item.model_dump(exclude_unset=True, exclude_none=True)
    if not store.update_by_id(EntityType.work, item_id, patch):
        raise HTTPException(status_code=404, detail="Work item not found")
    return {"success": True}


@router.delete("/work/{item_id}", response_model=SuccessResponse)
def delete_work(
    item_id: str,
    _admin: dict = Depends(require_admin),
    store: RecordStore = Depends(get_store),
):
    if not store.delete_by_id(EntityType.work, item_id):
        raise HTTPException(status_code=404, detail="Work item not found")
    return {"success": True}


@router.post("/work/upload", response_model=UploadResponse)
def upload_work_image(
    upload: ImageUpload,
    request: Request,
    _admin: dict = Depends(require_admin),
    settings: Settings = Depends(get_settings),
):
    if not upload.file_base64 or not upload.filename:
        raise HTTPException(status_code=400, detail="Missing file data")

    match = DATA_URL_RE.match(upload.file_base64)
    if not match:
        raise HTTPException(status_code=400, detail="Invalid base64 data")
    mime, data = match.groups()
    try:
        content = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Invalid base64 data")

    parts = mime.split("/")
    ext = re.sub(r"[^a-z0-9]", "", parts[1].lower()) if len(parts) > 1 else ""
    ext = ext or "png"
    safe_name = re.sub(r"[^a-zA-Z0-9\-_.]", "", upload.filename)
    base_name = re.sub(r"\.[^.]+$", "", safe_name)
    unique_name = f"{int(time.time() * 1000)}-{base_name}.{ext}"

    upload_dir = Path(settings.upload_dir) / "work"
    upload_dir.mkdir(parents=True, exist_ok=True)
    (upload_dir / unique_name).write_bytes(content)
    logger.info(f"Stored work image {unique_name} ({len(content)} bytes)")

    relative = f"/uploads/work/{unique_name}"
    return {"success": True, "url": str(request.base_url).rstrip("/") + relative, "relative": relative}
