# barbershop/routers/contact_routes.py

import logging

from fastapi import APIRouter, BackgroundTasks, Depends

from barbershop.deps import get_notifier, get_runner, get_store
from barbershop.models import Message
from barbershop.notifications import EmailNotifier
from barbershop.schemas import ContactCreate, SuccessResponse
from barbershop.store import EntityType, RecordStore, utc_timestamp
from barbershop.tasks import RetryRunner

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/contact",
    tags=["contact"],
)


@router.post("/send", response_model=SuccessResponse)
def send_contact_message(
    contact: ContactCreate,
    background_tasks: BackgroundTasks,
    store: RecordStore = Depends(get_store),
    notifier: EmailNotifier = Depends(get_notifier),
    runner: RetryRunner = Depends(get_runner),
):
    background_tasks.add_task(
        runner.run,
        f"Contact email from {contact.email}",
        notifier.send_contact_notification,
        contact,
    )

    message = Message(
        name=contact.name,
        email=contact.email,
        phone=contact.phone,
        message=f"Subject: {contact.subject}\n\n{contact.message}",
        created_at=utc_timestamp(),
        handled=False,
    )
    saved = store.append(EntityType.messages, message)
    logger.info(f"Contact message {saved.id} stored")

    return {
        "success": True,
        "message": "Message sent successfully! We will get back to you soon.",
    }
