"""Contact form service.

Messages are stored for the admin inbox and forwarded to the admin address.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from helpers.time_utils import utc_now
from models.config import settings
from models.exceptions import ContactMessageNotFoundException, ValidationException
from repositories.contact_repository import ContactMessageRepository
from services.email_service import EmailService


class ContactService:
    """Service for handling contact form submissions."""

    @staticmethod
    def submit(db: Session, data: schemas.ContactCreate) -> db_models.ContactMessage:
        """
        Store a contact message and notify the admin.

        The notification is best effort; the message is kept either way.

        Raises:
            ValidationException: If a field is empty once markup is removed
        """
        name = sanitize_plain_text(data.name) or ""
        subject = sanitize_plain_text(data.subject) or ""
        message = sanitize_plain_text(data.message) or ""
        if not (name and subject and message):
            raise ValidationException("Name, subject and message are required")

        contact = db_models.ContactMessage(
            name=name,
            email=str(data.email).lower(),
            subject=subject,
            message=message,
        )
        contact = ContactMessageRepository(db).create(contact)
        logger.info(f"Contact message {contact.id} received")

        sent = EmailService.send_contact_notification(
            to_email=settings.ADMIN_EMAIL,
            sender_name=name,
            sender_email=contact.email,
            subject=subject,
            message=message,
        )
        if not sent:
            logger.warning(
                f"Admin notification failed for contact message {contact.id}"
            )
        return contact

    @staticmethod
    def list_messages(
        db: Session,
        status: Optional[db_models.ContactStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[db_models.ContactMessage]:
        return ContactMessageRepository(db).get_newest_first(
            status=status, skip=skip, limit=limit
        )

    @staticmethod
    def resolve(db: Session, message_id: int) -> db_models.ContactMessage:
        repo = ContactMessageRepository(db)
        contact = repo.get_by_id(message_id)
        if contact is None:
            raise ContactMessageNotFoundException(message_id)
        if contact.status != db_models.ContactStatus.RESOLVED:
            contact.status = db_models.ContactStatus.RESOLVED
            contact.resolved_at = utc_now()
            contact = repo.update(contact)
        return contact
