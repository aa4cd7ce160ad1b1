from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session
from nyonjo.db.session import get_session
from nyonjo.services.message import MessageService

router = APIRouter()

class ContactRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None
    contact_preference: Optional[str] = None

@router.post("")
def submit_contact(data: ContactRequest, session: Session = Depends(get_session)):
    record = MessageService(session).submit_contact(
        name=data.name,
        email=data.email,
        phone=data.phone,
        subject=data.subject,
        message=data.message,
        contact_preference=data.contact_preference,
    )
    return {"success": True, "message": "Message sent successfully", "data": record}
