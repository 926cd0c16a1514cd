# barbershop/models.py

from typing import Optional

from sqlmodel import SQLModel, Field


class Appointment(SQLModel, table=True):
    row_id: Optional[int] = Field(default=None, primary_key=True)

    id: str = Field(default="", index=True)
    name: str
    phone: str
    email: str
    service: str
    barber: str = "default_barber"
    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    notes: str = ""
    status: str = "confirmed"
    created_at: str = ""


class Service(SQLModel, table=True):
    row_id: Optional[int] = Field(default=None, primary_key=True)

    id: str = Field(default="", index=True)
    name: str = ""
    description: str = ""
    duration: Optional[int] = None  # minutes
    price: Optional[float] = None
    category: str = ""
    active: bool = True


class WorkItem(SQLModel, table=True):
    row_id: Optional[int] = Field(default=None, primary_key=True)

    id: str = Field(default="", index=True)
    title: str = ""
    description: str = ""
    category: str = ""
    image_url: str = ""
    active: bool = True
    order: Optional[int] = None


class Message(SQLModel, table=True):
    row_id: Optional[int] = Field(default=None, primary_key=True)

    id: str = Field(default="", index=True)
    name: str
    email: str
    phone: str = ""
    message: str
    created_at: str = ""
    handled: bool = False
