from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from messagely.core.database import get_db
from messagely.api.dependencies import get_current_username, ensure_correct_user
from messagely.services.user_service import user_service

router = APIRouter(prefix="/users", tags=["users"])


class UserSummary(BaseModel):
    username: str
    first_name: str
    last_name: str

    model_config = ConfigDict(from_attributes=True)


class UserDetail(UserSummary):
    phone: str
    join_at: datetime
    last_login_at: Optional[datetime]


class PublicProfile(BaseModel):
    username: str
    first_name: str
    last_name: str
    phone: str


class SentMessage(BaseModel):
    id: int
    to_user: PublicProfile
    body: str
    sent_at: datetime
    read_at: Optional[datetime]


class ReceivedMessage(BaseModel):
    id: int
    from_user: PublicProfile
    body: str
    sent_at: datetime
    read_at: Optional[datetime]


@router.get("/", response_model=List[UserSummary])
async def list_users(
    current_username: str = Depends(get_current_username),
    db: Session = Depends(get_db)
):
    """Basic info on all users"""
    return user_service.all(db)


@router.get("/{username}", response_model=UserDetail)
async def get_user(
    username: str = Depends(ensure_correct_user),
    db: Session = Depends(get_db)
):
    return user_service.get(db, username)


@router.get("/{username}/from", response_model=List[SentMessage])
async def messages_from(
    username: str = Depends(ensure_correct_user),
    db: Session = Depends(get_db)
):
    """Messages sent by the logged-in user"""
    return user_service.messages_from(db, username)


@router.get("/{username}/to", response_model=List[ReceivedMessage])
async def messages_to(
    username: str = Depends(ensure_correct_user),
    db: Session = Depends(get_db)
):
    """Messages received by the logged-in user"""
    return user_service.messages_to(db, username)
