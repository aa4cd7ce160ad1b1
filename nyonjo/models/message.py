from typing import Optional
from datetime import datetime
from nyonjo.core.clock import utcnow
from enum import Enum
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import Text

class MessageStatus(str, Enum):
    UNREAD = "unread"
    READ = "read"
    REPLIED = "replied"
    ARCHIVED = "archived"

class ContactPreference(str, Enum):
    EMAIL = "email"
    WHATSAPP = "whatsapp"

class Message(SQLModel, table=True):
    __tablename__ = "messages"

    id: Optional[int] = Field(default=None, primary_key=True)

    # Sender (all optional, the form allows anonymous messages)
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    subject: str = "General Inquiry"
    message: str = Field(sa_column=Column(Text))
    contact_preference: ContactPreference = Field(default=ContactPreference.EMAIL)

    status: MessageStatus = Field(default=MessageStatus.UNREAD, index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
