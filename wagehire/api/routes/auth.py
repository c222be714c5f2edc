from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from wagehire.core.access_policy import Caller
from wagehire.core.auth_dependency import get_current_user, get_db
from wagehire.schemas.auth import (
    EmailRequest,
    LoginRequest,
    LoginResponse,
    ManualVerificationResponse,
    MessageResponse,
    PasswordResetDispatchResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    VerificationDispatchResponse,
)
from wagehire.schemas.user import UserEnvelope, UserMessageResponse
from wagehire.services import auth_service
from wagehire.services.email_service import EmailService, get_email_service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    mailer: EmailService = Depends(get_email_service),
):
    """
    Create an account.

    The very first account becomes the admin. Later accounts are candidates
    and receive a verification email; when it cannot be delivered the
    response includes ``verification_url`` instead.
    """
    return auth_service.register_user(db, payload, mailer)


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    return auth_service.authenticate(db, payload.email, payload.password)


@router.get("/verify-email", response_model=UserMessageResponse)
def verify_email(token: Optional[str] = Query(None), db: Session = Depends(get_db)):
    user = auth_service.verify_email(db, token)
    return {"message": "Email verified successfully! You can now login.", "user": user}


@router.post("/resend-verification", response_model=VerificationDispatchResponse)
def resend_verification(
    payload: EmailRequest,
    db: Session = Depends(get_db),
    mailer: EmailService = Depends(get_email_service),
):
    return auth_service.resend_verification(db, payload.email, mailer)


@router.get("/manual-verification/{email}", response_model=ManualVerificationResponse)
def manual_verification(email: str, db: Session = Depends(get_db)):
    """Development only: fetch the pending verification link for an account."""
    return auth_service.manual_verification_link(db, email)


@router.post("/forgot-password", response_model=PasswordResetDispatchResponse)
def forgot_password(
    payload: EmailRequest,
    db: Session = Depends(get_db),
    mailer: EmailService = Depends(get_email_service),
):
    return auth_service.request_password_reset(db, payload.email, mailer)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    auth_service.reset_password(db, payload.token, payload.password)
    return {"message": "Password reset successfully! You can now login with your new password."}


@router.get("/profile", response_model=UserEnvelope)
def profile(
    caller: Caller = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"user": auth_service.get_profile(db, caller)}
