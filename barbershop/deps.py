# barbershop/deps.py

from fastapi import Depends, HTTPException, Request

from .auth import ADMIN_ROLE, get_current_user
from .lifecycle import AppointmentManager
from .notifications import EmailNotifier
from .store import RecordStore
from .tasks import RetryRunner


def require_role(user: dict, role: str):
    if user["role"] != role:
        raise HTTPException(status_code=403, detail="Forbidden")


def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    require_role(current_user, ADMIN_ROLE)
    return current_user


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_manager(request: Request) -> AppointmentManager:
    return request.app.state.manager


def get_notifier(request: Request) -> EmailNotifier:
    return request.app.state.notifier


def get_runner(request: Request) -> RetryRunner:
    return request.app.state.runner
