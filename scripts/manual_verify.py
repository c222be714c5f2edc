"""
Manually verify accounts when verification email could not be delivered.

Run: python -m scripts.manual_verify            (list pending verifications)
     python -m scripts.manual_verify EMAIL      (verify one account)
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wagehire.core import config
from wagehire.core.clock import utcnow
from wagehire.db.session import SessionLocal
from wagehire.db.models.user import User
from wagehire.services.email_service import build_link
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def list_pending(db):
    """Print unverified users that still hold a verification token."""
    users = (
        db.query(User)
        .filter(User.email_verified.is_(False), User.email_verification_token.isnot(None))
        .order_by(User.created_at.desc())
        .all()
    )
    if not users:
        print("No unverified users found.")
        return

    now = utcnow()
    print(f"Found {len(users)} unverified user(s):\n")
    for index, user in enumerate(users, start=1):
        expired = user.email_verification_expires is None or now > user.email_verification_expires
        print(f"{index}. {user.name} ({user.email})")
        print(f"   Role: {user.role}")
        print(f"   Token expires: {user.email_verification_expires}")
        print(f"   Status: {'EXPIRED' if expired else 'VALID'}")
        if not expired:
            print(f"   Manual verification URL: {build_link(config.FRONTEND_URL, 'verify-email', user.email_verification_token)}")
        print("")


def verify_user(db, email: str) -> bool:
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user:
        logger.error(f"User {email} not found")
        return False
    if user.email_verified:
        logger.info(f"User {email} is already verified")
        return True

    user.email_verified = True
    user.email_verification_token = None
    user.email_verification_expires = None
    db.commit()
    logger.info(f"Verified user {email} (ID: {user.id})")
    return True


if __name__ == "__main__":
    db = SessionLocal()
    try:
        if len(sys.argv) > 1:
            if not verify_user(db, sys.argv[1]):
                print(f"\n[ERROR] Failed to verify {sys.argv[1]}")
                sys.exit(1)
            print(f"\n[SUCCESS] {sys.argv[1]} is now verified and can log in")
        else:
            list_pending(db)
    finally:
        db.close()
