import logging
from typing import List, Optional

from sqlmodel import Session, select

from nyonjo.core.clock import utcnow
from nyonjo.core.exceptions import NotFoundError, ValidationError
from nyonjo.models.message import ContactPreference, Message, MessageStatus

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def parse_status(value: Optional[str], default: MessageStatus) -> MessageStatus:
    if not value:
        return default
    try:
        return MessageStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in MessageStatus)
        raise ValidationError(f"Invalid status '{value}'. Allowed: {allowed}", field="status")


class MessageService:
    def __init__(self, session: Session):
        self.session = session

    def submit_contact(self, name: Optional[str], email: Optional[str], phone: Optional[str],
                       subject: Optional[str], message: Optional[str],
                       contact_preference: Optional[str] = None) -> Message:
        if not _clean(message):
            raise ValidationError("Message is required", field="message")

        try:
            preference = ContactPreference(contact_preference or ContactPreference.EMAIL)
        except ValueError:
            raise ValidationError("Contact preference must be 'email' or 'whatsapp'", field="contact_preference")

        if preference == ContactPreference.EMAIL and not _clean(email):
            raise ValidationError("Email is required for email response", field="email")
        if preference == ContactPreference.WHATSAPP and not _clean(phone):
            raise ValidationError("Phone number is required for WhatsApp response", field="phone")

        record = Message(
            name=_clean(name),
            email=_clean(email),
            phone=_clean(phone),
            subject=_clean(subject) or "General Inquiry",
            message=message.strip(),
            contact_preference=preference,
            status=MessageStatus.UNREAD,
        )
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        logger.info("Contact message %s received (reply via %s)", record.id, preference.value)
        return record

    def list_messages(self, status: Optional[str] = None) -> List[Message]:
        query = select(Message)
        if status:
            query = query.where(Message.status == parse_status(status, MessageStatus.UNREAD))
        return self.session.exec(query.order_by(Message.created_at.desc(), Message.id.desc())).all()

    def get(self, message_id: int) -> Message:
        record = self.session.get(Message, message_id)
        if not record:
            raise NotFoundError("Message", message_id)
        return record

    def update_status(self, message_id: int, status: Optional[str]) -> Message:
        record = self.get(message_id)
        record.status = parse_status(status, MessageStatus.READ)
        record.updated_at = utcnow()
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)
        return record

    def delete(self, message_id: int) -> None:
        record = self.get(message_id)
        self.session.delete(record)
        self.session.commit()
