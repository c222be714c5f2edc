from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from wagehire.core.access_policy import Caller, caller_for, require_admin
from wagehire.core.errors import Unauthenticated
from wagehire.core.security import decode_access_token, InvalidToken
from wagehire.db.session import SessionLocal
from wagehire.db.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_db():
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_obj(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the bearer token to the stored user."""
    if not token:
        raise Unauthenticated("Access token required")

    claims = decode_access_token(token)

    user = db.query(User).filter(User.id == claims.user_id).first()
    if not user:
        # Account deleted after the token was issued
        raise InvalidToken()
    return user


def get_current_user(user: User = Depends(get_current_user_obj)) -> Caller:
    """Caller identity for the access policy; role comes from the stored row."""
    return caller_for(user)


def get_admin_user(caller: Caller = Depends(get_current_user)) -> Caller:
    return require_admin(caller)
