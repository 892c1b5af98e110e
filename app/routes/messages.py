import logging
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import field_validator
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..email_service import send_new_message_notification
from ..models import Message, Property, User
from ..schemas import CamelModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Messages"])

UPDATABLE_STATUSES = ("read", "replied", "archived")


class MessageCreate(CamelModel):
    recipient_id: int
    property_id: Optional[int] = None
    subject: str
    content: str

    @field_validator("subject", "content")
    @classmethod
    def validate_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()


class MessageStatusUpdate(CamelModel):
    status: str


class MessageOut(CamelModel):
    id: int
    sender_id: int
    recipient_id: int
    property_id: Optional[int] = None
    subject: str
    content: str
    status: str
    created_at: Optional[datetime] = None


@router.get("/user/messages", response_model=list[MessageOut])
async def get_messages(
    role: Literal["sent", "received"] = Query("received"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    query = db.query(Message)
    if role == "sent":
        query = query.filter(Message.sender_id == current_user.id)
    else:
        query = query.filter(Message.recipient_id == current_user.id)
    return query.order_by(Message.created_at.desc(), Message.id.desc()).all()


@router.post("/messages", response_model=MessageOut, status_code=201)
async def send_message(
    data: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    recipient = db.query(User).filter(User.id == data.recipient_id).first()
    if not recipient:
        raise HTTPException(status_code=404, detail="Recipient not found")
    if data.property_id is not None:
        if not db.query(Property).filter(Property.id == data.property_id).first():
            raise HTTPException(status_code=404, detail="Property not found")

    message = Message(
        sender_id=current_user.id,
        recipient_id=recipient.id,
        property_id=data.property_id,
        subject=data.subject,
        content=data.content,
        status="unread",
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    logger.info(f"✉️ Message {message.id} sent from user {current_user.id} to {recipient.id}")

    # Delivery problems are logged inside and never fail the request
    await send_new_message_notification(recipient, message, current_user)
    return message


@router.patch("/messages/{message_id}/status", response_model=MessageOut)
async def update_message_status(
    message_id: int,
    data: MessageStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if data.status not in UPDATABLE_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Status must be one of: {', '.join(UPDATABLE_STATUSES)}",
        )

    message = db.query(Message).filter(Message.id == message_id).first()
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")
    if message.recipient_id != current_user.id:
        raise HTTPException(
            status_code=403, detail="You don't have permission to update this message"
        )

    message.status = data.status
    db.commit()
    db.refresh(message)
    return message
