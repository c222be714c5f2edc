from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean
from sqlalchemy.sql import func
from wagehire.db.base import Base


class User(Base):
    """
    Registered identity. The first user ever created is the admin; everyone
    after that is a candidate.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)  # bcrypt hash
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="candidate")  # admin / candidate

    # Profile
    phone = Column(String, nullable=True)
    resume_url = Column(String, nullable=True)
    current_position = Column(String, nullable=True)
    experience_years = Column(Integer, nullable=True)
    skills = Column(Text, nullable=True)

    # Single-use tokens, cleared on success
    email_verified = Column(Boolean, nullable=False, default=False)
    email_verification_token = Column(String, nullable=True, index=True)
    email_verification_expires = Column(DateTime, nullable=True)
    password_reset_token = Column(String, nullable=True, index=True)
    password_reset_expires = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), nullable=False)
