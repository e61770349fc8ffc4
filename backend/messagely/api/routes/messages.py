from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from messagely.core.database import get_db
from messagely.api.dependencies import get_current_username
from messagely.api.routes.users import PublicProfile
from messagely.services.message_service import message_service

router = APIRouter(prefix="/messages", tags=["messages"])


class MessageCreate(BaseModel):
    to_username: str
    body: str


class MessageCreated(BaseModel):
    id: int
    from_username: str
    to_username: str
    body: str
    sent_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageDetail(BaseModel):
    id: int
    body: str
    sent_at: datetime
    read_at: Optional[datetime]
    from_user: PublicProfile
    to_user: PublicProfile


class MessageRead(BaseModel):
    id: int
    read_at: datetime

    model_config = ConfigDict(from_attributes=True)


@router.get("/{message_id}", response_model=MessageDetail)
async def get_message(
    message_id: int,
    current_username: str = Depends(get_current_username),
    db: Session = Depends(get_db)
):
    """Message detail; only its sender or recipient may view it"""
    message = message_service.view(db, message_id, current_username)
    return message_service.detail(message)


@router.post("/", response_model=MessageCreated, status_code=status.HTTP_201_CREATED)
async def create_message(
    req: MessageCreate,
    current_username: str = Depends(get_current_username),
    db: Session = Depends(get_db)
):
    """Send a message from the logged-in user"""
    return message_service.send(db, current_username, req.to_username, req.body)


@router.post("/{message_id}/read", response_model=MessageRead)
async def mark_message_read(
    message_id: int,
    current_username: str = Depends(get_current_username),
    db: Session = Depends(get_db)
):
    """Mark read; only the recipient may, and read_at never changes once set"""
    return message_service.mark_read(db, message_id, current_username)
