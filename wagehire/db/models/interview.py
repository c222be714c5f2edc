from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from wagehire.db.base import Base


class Interview(Base):
    __tablename__ = "interviews"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    company_name = Column(String, nullable=False)
    job_title = Column(String, nullable=False)
    scheduled_date = Column(DateTime, nullable=True)
    duration = Column(Integer, nullable=True)  # minutes; null only while status is uncertain
    status = Column(String, nullable=False, default="scheduled")  # scheduled / uncertain / completed / cancelled / rescheduled
    round = Column(Integer, nullable=False, default=1)
    interview_type = Column(String, nullable=False, default="technical")  # hr / technical / final
    location = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    # Company
    company_website = Column(String, nullable=True)
    company_linkedin_url = Column(String, nullable=True)
    other_urls = Column(Text, nullable=True)
    job_description = Column(Text, nullable=True)
    salary_range = Column(String, nullable=True)

    # Interviewer
    interviewer_name = Column(String, nullable=True)
    interviewer_email = Column(String, nullable=True)
    interviewer_position = Column(String, nullable=True)
    interviewer_linkedin_url = Column(String, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), nullable=False)
