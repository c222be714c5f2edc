"""
Registration, login, email verification and password reset.

Mail delivery is never fatal: when the mailer reports non-delivery the
response carries the same link that would have been emailed.
"""
import logging
import threading
from datetime import timedelta
from typing import Dict, Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wagehire.core import config
from wagehire.core.access_policy import Caller, UserRole
from wagehire.core.clock import utcnow
from wagehire.core.errors import Conflict, NotFound, Unauthenticated, ValidationFailed
from wagehire.core.logging_config import sanitize_log_data
from wagehire.core.security import (
    PASSWORD_REQUIREMENTS,
    create_access_token,
    generate_password_reset_token,
    generate_verification_token,
    hash_password,
    password_strength_errors,
    verify_password,
)
from wagehire.db.models.user import User
from wagehire.schemas.auth import RegisterRequest
from wagehire.services.email_service import EmailService, build_link

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account with that email exists, a password reset link has been sent"

# Serializes the first-user check with the insert that depends on it
_registration_lock = threading.Lock()


def _check_password_strength(password: str) -> None:
    errors = password_strength_errors(password)
    if errors:
        raise ValidationFailed(
            "Password does not meet security requirements",
            password_errors=errors,
            password_requirements=PASSWORD_REQUIREMENTS,
        )


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def register_user(db: Session, payload: RegisterRequest, mailer: EmailService) -> Dict[str, Any]:
    """
    Create an account.

    The first account ever created becomes the admin and is verified on the
    spot. Every later account is a candidate and gets a verification link,
    whatever role the client asked for.

    Args:
        db: Database session
        payload: Validated registration body
        mailer: Email collaborator used for the verification link

    Returns:
        Dictionary with message, user, is_admin, delivery flags and, when the
        mail was not delivered, ``verification_url``

    Raises:
        Conflict: Email already registered
        ValidationFailed: Password too weak
    """
    logger.debug(f"Registration request: {sanitize_log_data(payload.model_dump())}")
    email = payload.email.strip().lower()

    if get_user_by_email(db, email):
        raise Conflict("User already exists")

    _check_password_strength(payload.password)
    password_hash = hash_password(payload.password)

    with _registration_lock:
        user, verification_token = _insert_user(db, payload, email, password_hash)

    is_first_user = user.role == UserRole.ADMIN.value
    logger.info(f"User registered: user_id={user.id}, role={user.role}")

    delivery = None
    if verification_token:
        delivery = mailer.send_verification(user.email, user.name, verification_token, config.FRONTEND_URL)

    if is_first_user:
        message = "Admin account created successfully! You can now login."
    elif delivery.delivered:
        message = "Registration successful! Please check your email to verify your account."
    else:
        message = "Registration successful! Use the verification link below to confirm your account."

    return {
        "message": message,
        "user": user,
        "is_admin": is_first_user,
        "email_verification_sent": bool(delivery and delivery.delivered),
        "requires_verification": config.REQUIRE_EMAIL_VERIFICATION and not is_first_user,
        "verification_url": delivery.fallback_url if delivery and not delivery.delivered else None,
    }


def _insert_user(db: Session, payload: RegisterRequest, email: str, password_hash: str):
    """Decide the role and insert the row; must run under ``_registration_lock``."""
    is_first_user = db.query(func.count(User.id)).scalar() == 0
    role = UserRole.ADMIN if is_first_user else UserRole.CANDIDATE

    user = User(
        email=email,
        password=password_hash,
        name=payload.name,
        role=role.value,
        phone=payload.phone,
        resume_url=payload.resume_url,
        current_position=payload.current_position,
        experience_years=payload.experience_years,
        skills=payload.skills,
        email_verified=is_first_user,
    )

    verification_token = None
    if not is_first_user:
        verification_token = generate_verification_token()
        user.email_verification_token = verification_token
        user.email_verification_expires = utcnow() + timedelta(hours=config.EMAIL_VERIFICATION_EXPIRE_HOURS)

    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("User already exists")
    db.refresh(user)
    return user, verification_token


def authenticate(db: Session, email: str, password: str) -> Dict[str, Any]:
    """
    Check credentials and issue a bearer token.

    Raises:
        Unauthenticated: Unknown email, wrong password, or (when required)
            unverified email
    """
    user = get_user_by_email(db, email)

    if not user or not verify_password(password, user.password):
        logger.warning("Login failed: invalid credentials")
        raise Unauthenticated("Invalid credentials")

    if (
        config.REQUIRE_EMAIL_VERIFICATION
        and user.role != UserRole.ADMIN.value
        and not user.email_verified
    ):
        raise Unauthenticated(
            "Please verify your email address before logging in",
            email_not_verified=True,
        )

    logger.info(f"Login successful: user_id={user.id}")

    return {
        "message": "Login successful",
        "token": create_access_token(user),
        "token_type": "bearer",
        "user": user,
    }


def verify_email(db: Session, token: Optional[str]) -> User:
    if not token:
        raise ValidationFailed("Verification token is required")

    user = db.query(User).filter(User.email_verification_token == token).first()
    if not user:
        raise ValidationFailed("Invalid verification token")

    if user.email_verification_expires is None or utcnow() > user.email_verification_expires:
        raise ValidationFailed("Verification token has expired")

    user.email_verified = True
    user.email_verification_token = None
    user.email_verification_expires = None
    db.commit()
    db.refresh(user)

    logger.info(f"Email verified: user_id={user.id}")
    return user


def resend_verification(db: Session, email: str, mailer: EmailService) -> Dict[str, Any]:
    """Issue a fresh verification token and mail it, replacing any earlier one."""
    user = get_user_by_email(db, email)
    if not user:
        raise NotFound("User not found")
    if user.email_verified:
        raise ValidationFailed("Email is already verified")

    token = generate_verification_token()
    user.email_verification_token = token
    user.email_verification_expires = utcnow() + timedelta(hours=config.EMAIL_VERIFICATION_EXPIRE_HOURS)
    db.commit()

    delivery = mailer.send_verification(user.email, user.name, token, config.FRONTEND_URL)
    if delivery.delivered:
        return {
            "message": "Verification email sent successfully! Please check your email.",
            "email_sent": True,
            "verification_url": None,
        }
    return {
        "message": "Please use the verification link below to confirm your account.",
        "email_sent": False,
        "verification_url": delivery.fallback_url,
    }


def manual_verification_link(db: Session, email: str) -> Dict[str, Any]:
    """Development helper: look up a pending verification link for an email."""
    if not config.is_development():
        raise NotFound("Not found")

    user = get_user_by_email(db, email)
    if not user:
        raise NotFound("User not found")
    if user.email_verified:
        raise ValidationFailed("Email is already verified")
    if not user.email_verification_token:
        raise ValidationFailed("No verification token found. Please request a new verification email.")
    if user.email_verification_expires is None or utcnow() > user.email_verification_expires:
        raise ValidationFailed("Verification token has expired. Please request a new verification email.")

    return {
        "message": "Manual verification link retrieved successfully",
        "email": user.email,
        "name": user.name,
        "verification_url": build_link(config.FRONTEND_URL, "verify-email", user.email_verification_token),
        "expires_at": user.email_verification_expires.isoformat(),
    }


def request_password_reset(db: Session, email: str, mailer: EmailService) -> Dict[str, Any]:
    """
    Start a password reset.

    Unknown addresses get the same message and no error. Known addresses get
    a one-hour single-use token by mail, or the reset link in the response
    when the mail could not be delivered.
    """
    user = get_user_by_email(db, email)
    if not user:
        return {"message": RESET_REQUESTED_MESSAGE, "email_sent": False, "reset_url": None}

    token = generate_password_reset_token()
    user.password_reset_token = token
    user.password_reset_expires = utcnow() + timedelta(hours=config.PASSWORD_RESET_EXPIRE_HOURS)
    db.commit()

    logger.info(f"Password reset requested: user_id={user.id}")

    delivery = mailer.send_password_reset(user.email, user.name, token, config.FRONTEND_URL)
    if delivery.delivered:
        return {"message": RESET_REQUESTED_MESSAGE, "email_sent": True, "reset_url": None}
    return {
        "message": "Email delivery is unavailable. Use the link below to reset your password.",
        "email_sent": False,
        "reset_url": delivery.fallback_url,
    }


def reset_password(db: Session, token: str, new_password: str) -> None:
    _check_password_strength(new_password)

    user = db.query(User).filter(User.password_reset_token == token).first()
    if not user:
        raise ValidationFailed("Invalid reset token")
    if user.password_reset_expires is None or utcnow() > user.password_reset_expires:
        raise ValidationFailed("Reset token has expired")

    user.password = hash_password(new_password)
    user.password_reset_token = None
    user.password_reset_expires = None
    db.commit()

    logger.info(f"Password reset completed: user_id={user.id}")


def get_profile(db: Session, caller: Caller) -> User:
    user = db.query(User).filter(User.id == caller.id).first()
    if not user:
        raise NotFound("User not found")
    return user
