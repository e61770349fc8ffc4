import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from pydantic import BaseModel
from messagely.core.database import get_db
from messagely.core.security import session_issuer
from messagely.services.notifier import SmsNotifier, get_notifier
from messagely.services.reset_code_service import reset_code_service
from messagely.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(BaseModel):
    username: str
    password: str
    first_name: str
    last_name: str
    phone: str


class ForgotPasswordRequest(BaseModel):
    username: str


class UpdatePasswordRequest(BaseModel):
    username: str
    code: str
    new_password: str


class Token(BaseModel):
    token: str


class MessageResponse(BaseModel):
    message: str


@router.post("/login", response_model=Token)
async def login(req: LoginRequest, db: Session = Depends(get_db)):
    """{username, password} => {token}"""
    # Same error for unknown user and wrong password - no username enumeration
    if not user_service.authenticate(db, req.username, req.password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid user/password"
        )

    user_service.record_login(db, req.username)
    return {"token": session_issuer.issue(req.username)}


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(req: RegisterRequest, db: Session = Depends(get_db)):
    """Register, log in and return a token"""
    user = user_service.register(
        db,
        username=req.username,
        password=req.password,
        first_name=req.first_name,
        last_name=req.last_name,
        phone=req.phone,
    )
    user_service.record_login(db, user.username)
    return {"token": session_issuer.issue(user.username)}


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    req: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    notifier: SmsNotifier = Depends(get_notifier),
):
    """
    Issue a reset code and text it to the user.

    The code is stored before delivery is attempted. If delivery fails the
    stored code stays valid and the caller gets a 502.
    """
    issued = reset_code_service.issue_reset_code(db, req.username)
    if not notifier.send(issued.code, issued.phone):
        logger.warning(f"Reset code for {req.username} stored but not delivered")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Unable to deliver reset code"
        )
    return {"message": "Check your phone for a reset code"}


@router.post("/update-password", response_model=MessageResponse)
async def update_password(req: UpdatePasswordRequest, db: Session = Depends(get_db)):
    """{username, code, new_password} => replaces the password if the code matches"""
    if not reset_code_service.verify_reset_code(db, req.username, req.code):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid user/reset code"
        )

    reset_code_service.consume_reset_code(db, req.username, req.new_password)
    return {"message": "Password updated"}
