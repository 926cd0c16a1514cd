# barbershop/schemas.py

import re
from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


def _check_email(value: str) -> str:
    value = value.strip()
    if not EMAIL_RE.match(value):
        raise ValueError("Please provide a valid email")
    return value


def _check_name(value: str) -> str:
    value = value.strip()
    if len(value) < 2:
        raise ValueError("Name must be at least 2 characters")
    return value


def _check_phone(value: str) -> str:
    value = value.strip()
    if len(value) < 10:
        raise ValueError("Phone number must be at least 10 characters")
    return value


class AppointmentCreate(BaseModel):
    name: str
    email: str
    phone: str
    service: str
    date: date
    time: str
    notes: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _check_name(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return _check_phone(v)

    @field_validator("service")
    @classmethod
    def validate_service(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Service is required")
        return v

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        match = TIME_RE.match(v.strip())
        if not match:
            raise ValueError("Valid time format required (HH:MM)")
        hours, minutes = match.groups()
        return f"{int(hours):02d}:{minutes}"

    @field_validator("notes", mode="before")
    @classmethod
    def default_notes(cls, v):
        return v or ""


class AppointmentPublic(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    phone: str
    service: str
    barber: str
    date: str
    time: str
    notes: str = ""
    status: str
    created_at: str = Field(default="", alias="createdAt")


class BookingResponse(BaseModel):
    success: bool = True
    message: str
    appointment: AppointmentPublic


class AvailabilityResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    date: date
    available_times: List[str] = Field(alias="availableTimes")


class StatusUpdate(BaseModel):
    status: AppointmentStatus


class ContactCreate(BaseModel):
    name: str
    email: str
    phone: str
    subject: str
    message: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _check_name(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return _check_phone(v)

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Subject is required")
        return v

    @field_validator("message")
    @classmethod
    def validate_message(cls, v):
        v = v.strip()
        if len(v) < 10:
            raise ValueError("Message must be at least 10 characters")
        return v


class MessagePublic(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    phone: str = ""
    message: str
    created_at: str = Field(default="", alias="createdAt")
    handled: bool = False


class ServiceIn(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0, alias="duration_min")
    price: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = None
    active: Optional[bool] = None

    model_config = ConfigDict(populate_by_name=True)


class ServicePublic(BaseModel):
    id: str
    name: str
    description: str = ""
    duration: Optional[int] = None
    price: Optional[float] = None
    category: str = ""
    active: bool = True


class WorkIn(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    active: Optional[bool] = None
    order: Optional[int] = None


class WorkPublic(BaseModel):
    id: str
    title: str
    description: str = ""
    category: str = ""
    image_url: str = ""
    active: bool = True
    order: Optional[int] = None


class ImageUpload(BaseModel):
    file_base64: str = Field(default="", alias="fileBase64")
    filename: str = ""


class LoginRequest(BaseModel):
    username: str
    password: str


class Token(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    message: str = "Login successful"


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class AppointmentListResponse(BaseModel):
    success: bool = True
    appointments: List[AppointmentPublic]


class ReconcileResponse(BaseModel):
    success: bool = True
    updated: List[str]


class MigrateIdsResponse(BaseModel):
    success: bool = True
    updated: int


class MessageListResponse(BaseModel):
    success: bool = True
    messages: List[MessagePublic]


class ServiceListResponse(BaseModel):
    success: bool = True
    services: List[ServicePublic]


class ServiceCreatedResponse(BaseModel):
    success: bool = True
    service: ServicePublic


class WorkListResponse(BaseModel):
    success: bool = True
    work: List[WorkPublic]


class WorkCreatedResponse(BaseModel):
    success: bool = True
    item: WorkPublic


class UploadResponse(BaseModel):
    success: bool = True
    url: str
    relative: str
