from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from wagehire.db.base import Base


class InterviewFeedback(Base):
    """Feedback a candidate received after an interview; one per (interview, candidate)."""
    __tablename__ = "interview_feedback"

    id = Column(Integer, primary_key=True, index=True)
    interview_id = Column(Integer, ForeignKey("interviews.id"), nullable=False, index=True)
    candidate_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    technical_skills = Column(Integer, nullable=False)
    communication_skills = Column(Integer, nullable=False)
    problem_solving = Column(Integer, nullable=False)
    cultural_fit = Column(Integer, nullable=False)
    overall_rating = Column(Integer, nullable=False)
    feedback_text = Column(Text, nullable=False)
    recommendation = Column(String, nullable=False)  # hire / reject / maybe
    received_at = Column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("interview_id", "candidate_id", name="uq_feedback_interview_candidate"),
    )
