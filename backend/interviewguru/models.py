"""
SQLAlchemy ORM models for candidates, interviews, recordings,
evaluations and notifications.

Timestamps are naive UTC. There is no cascade delete: removing a
candidate leaves its interviews and evaluations in place.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, Float, ForeignKey, Text, DateTime, Boolean, JSON,
)
from sqlalchemy.orm import relationship
from .database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Candidate(Base):
    __tablename__ = "candidates"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String, nullable=False, index=True)
    email = Column(String, nullable=False, unique=True)
    phone = Column(String, nullable=True)
    position = Column(String, nullable=False)
    experience = Column(Integer, nullable=True)
    skills = Column(JSON, default=list)
    resume = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String, default="active", nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    interviews = relationship("Interview", back_populates="candidate")
    evaluations = relationship("Evaluation", back_populates="candidate")

    def __repr__(self) -> str:
        return f"<Candidate(id={self.id}, name={self.name}, status={self.status})>"


class Interview(Base):
    __tablename__ = "interviews"

    id = Column(String(36), primary_key=True, default=_uuid)
    candidate_id = Column(String(36), ForeignKey("candidates.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    scheduled_at = Column(DateTime, nullable=False, index=True)
    duration = Column(Integer, nullable=False)
    status = Column(String, default="scheduled", nullable=False, index=True)
    type = Column(String, nullable=False)
    location = Column(String, nullable=True)
    interviewer_email = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    candidate = relationship("Candidate", back_populates="interviews")
    recordings = relationship("Recording", back_populates="interview")
    evaluations = relationship("Evaluation", back_populates="interview")

    def __repr__(self) -> str:
        return (
            f"<Interview(id={self.id}, candidate={self.candidate_id}, "
            f"at={self.scheduled_at}, status={self.status})>"
        )


class Recording(Base):
    __tablename__ = "recordings"

    id = Column(String(36), primary_key=True, default=_uuid)
    interview_id = Column(String(36), ForeignKey("interviews.id"), nullable=False, index=True)
    video_path = Column(String, nullable=True)
    audio_path = Column(String, nullable=True)
    transcription = Column(Text, nullable=True)
    duration = Column(Integer, nullable=True)  # seconds
    size = Column(Integer, nullable=True)  # bytes
    created_at = Column(DateTime, default=utcnow, nullable=False)

    interview = relationship("Interview", back_populates="recordings")

    def __repr__(self) -> str:
        return f"<Recording(id={self.id}, interview={self.interview_id})>"


class Evaluation(Base):
    __tablename__ = "evaluations"

    id = Column(String(36), primary_key=True, default=_uuid)
    interview_id = Column(String(36), ForeignKey("interviews.id"), nullable=False, index=True)
    candidate_id = Column(String(36), ForeignKey("candidates.id"), nullable=False, index=True)
    technical_score = Column(Float, nullable=True)
    communication_score = Column(Float, nullable=True)
    problem_solving_score = Column(Float, nullable=True)
    overall_score = Column(Float, nullable=True)
    strengths = Column(Text, nullable=True)
    weaknesses = Column(Text, nullable=True)
    recommendation = Column(String, nullable=True)
    feedback = Column(Text, nullable=True)
    evaluator_email = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    interview = relationship("Interview", back_populates="evaluations")
    candidate = relationship("Candidate", back_populates="evaluations")

    def __repr__(self) -> str:
        return (
            f"<Evaluation(id={self.id}, interview={self.interview_id}, "
            f"overall={self.overall_score}, recommendation={self.recommendation})>"
        )


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=_uuid)
    recipient_email = Column(String, nullable=False, index=True)
    type = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    sent = Column(Boolean, default=False, nullable=False)
    sent_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, to={self.recipient_email}, sent={self.sent})>"
