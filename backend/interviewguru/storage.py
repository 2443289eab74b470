"""
Query layer — filtered lists, lookups and writes for every entity.

All functions take the caller's session. Lookups return None when the row
does not exist; the API layer turns that into a 404.
"""

import logging
from datetime import date, datetime, time
from typing import Any, Optional

from sqlalchemy.orm import Session

from .models import Candidate, Evaluation, Interview, Notification, Recording, utcnow

logger = logging.getLogger(__name__)


def _save(db: Session, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def _apply(db: Session, obj, changes: dict[str, Any]):
    """Apply a partial update; id and created_at are never touched."""
    for field, value in changes.items():
        if field in {"id", "created_at"}:
            continue
        setattr(obj, field, value)
    if hasattr(obj, "updated_at"):
        obj.updated_at = utcnow()
    return _save(db, obj)


# ── Candidates ──────────────────────────────────────────────────────────────

def list_candidates(
    db: Session, limit: int = 50, offset: int = 0, search: Optional[str] = None,
) -> list[Candidate]:
    query = db.query(Candidate)
    if search:
        # Match the text literally; % and _ are LIKE wildcards.
        term = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        query = query.filter(Candidate.name.ilike(f"%{term}%", escape="\\"))
    return (
        query.order_by(Candidate.created_at.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )


def get_candidate(db: Session, candidate_id: str) -> Optional[Candidate]:
    return db.query(Candidate).filter(Candidate.id == candidate_id).first()


def create_candidate(db: Session, data: dict[str, Any]) -> Candidate:
    candidate = _save(db, Candidate(**data))
    logger.info("Created candidate %s (%s)", candidate.id, candidate.name)
    return candidate


def update_candidate(db: Session, candidate: Candidate, changes: dict[str, Any]) -> Candidate:
    return _apply(db, candidate, changes)


def delete_candidate(db: Session, candidate_id: str) -> None:
    # Dependent interviews and evaluations are left in place.
    db.query(Candidate).filter(Candidate.id == candidate_id).delete()
    db.commit()
    logger.info("Deleted candidate %s", candidate_id)


# ── Interviews ──────────────────────────────────────────────────────────────

def list_interviews(
    db: Session, candidate_id: Optional[str] = None, status: Optional[str] = None,
) -> list[Interview]:
    query = db.query(Interview)
    if candidate_id:
        query = query.filter(Interview.candidate_id == candidate_id)
    if status:
        query = query.filter(Interview.status == status)
    return query.order_by(Interview.scheduled_at.desc()).all()


def get_interview(db: Session, interview_id: str) -> Optional[Interview]:
    return db.query(Interview).filter(Interview.id == interview_id).first()


def create_interview(db: Session, data: dict[str, Any]) -> Interview:
    interview = _save(db, Interview(**data))
    logger.info(
        "Scheduled interview %s for candidate %s at %s",
        interview.id, interview.candidate_id, interview.scheduled_at,
    )
    return interview


def update_interview(db: Session, interview: Interview, changes: dict[str, Any]) -> Interview:
    return _apply(db, interview, changes)


def delete_interview(db: Session, interview_id: str) -> None:
    db.query(Interview).filter(Interview.id == interview_id).delete()
    db.commit()


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Inclusive [00:00:00, 23:59:59.999999] range for a calendar day."""
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def get_upcoming_interviews(db: Session, day: date) -> list[Interview]:
    """Scheduled interviews falling on ``day``, earliest first."""
    start, end = day_bounds(day)
    return (
        db.query(Interview)
        .filter(
            Interview.scheduled_at >= start,
            Interview.scheduled_at <= end,
            Interview.status == "scheduled",
        )
        .order_by(Interview.scheduled_at.asc())
        .all()
    )


# ── Recordings ──────────────────────────────────────────────────────────────

def list_recordings(db: Session, interview_id: Optional[str] = None) -> list[Recording]:
    query = db.query(Recording)
    if interview_id:
        query = query.filter(Recording.interview_id == interview_id)
    return query.order_by(Recording.created_at.desc()).all()


def get_recording(db: Session, recording_id: str) -> Optional[Recording]:
    return db.query(Recording).filter(Recording.id == recording_id).first()


def create_recording(db: Session, data: dict[str, Any]) -> Recording:
    return _save(db, Recording(**data))


def update_recording(db: Session, recording: Recording, changes: dict[str, Any]) -> Recording:
    return _apply(db, recording, changes)


# ── Evaluations ─────────────────────────────────────────────────────────────

def list_evaluations(
    db: Session, candidate_id: Optional[str] = None, interview_id: Optional[str] = None,
) -> list[Evaluation]:
    query = db.query(Evaluation)
    if candidate_id:
        query = query.filter(Evaluation.candidate_id == candidate_id)
    if interview_id:
        query = query.filter(Evaluation.interview_id == interview_id)
    return query.order_by(Evaluation.created_at.desc()).all()


def get_evaluation(db: Session, evaluation_id: str) -> Optional[Evaluation]:
    return db.query(Evaluation).filter(Evaluation.id == evaluation_id).first()


def create_evaluation(db: Session, data: dict[str, Any]) -> Evaluation:
    evaluation = _save(db, Evaluation(**data))
    logger.info(
        "Stored evaluation %s for interview %s (overall=%s)",
        evaluation.id, evaluation.interview_id, evaluation.overall_score,
    )
    return evaluation


def update_evaluation(db: Session, evaluation: Evaluation, changes: dict[str, Any]) -> Evaluation:
    return _apply(db, evaluation, changes)


# ── Notifications ───────────────────────────────────────────────────────────

def list_notifications(
    db: Session, recipient_email: Optional[str] = None, sent: Optional[bool] = None,
) -> list[Notification]:
    query = db.query(Notification)
    if recipient_email:
        query = query.filter(Notification.recipient_email == recipient_email)
    if sent is not None:
        query = query.filter(Notification.sent == sent)
    return query.order_by(Notification.created_at.desc()).all()


def create_notification(db: Session, data: dict[str, Any]) -> Notification:
    return _save(db, Notification(**data))


def mark_notification_sent(db: Session, notification: Notification) -> Notification:
    notification.sent = True
    notification.sent_at = utcnow()
    return _save(db, notification)
