"""
Rollup metrics for the dashboard and analytics pages.
"""

import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from .models import Candidate, Evaluation, Interview, utcnow
from .utils import round_score

logger = logging.getLogger(__name__)

WEEK = timedelta(days=7)
TOP_PERFORMERS = 5


def mean_score(scores: Iterable[Optional[float]]) -> float:
    """Mean of the non-null scores rounded to one decimal, 0 when there are none."""
    present = [s for s in scores if s is not None]
    if not present:
        return 0
    return round_score(sum(present) / len(present))


def get_interview_metrics(db: Session, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()

    total_interviews = db.query(func.count(Interview.id)).scalar() or 0
    active_candidates = (
        db.query(func.count(Candidate.id))
        .filter(Candidate.status == "active")
        .scalar()
    ) or 0
    weekly_interviews = (
        db.query(func.count(Interview.id))
        .filter(Interview.scheduled_at >= now - WEEK, Interview.scheduled_at <= now)
        .scalar()
    ) or 0
    overall = [
        score for (score,) in db.query(Evaluation.overall_score)
        .filter(Evaluation.overall_score.isnot(None))
    ]

    metrics = {
        "total_interviews": total_interviews,
        "active_candidates": active_candidates,
        "weekly_interviews": weekly_interviews,
        "average_score": mean_score(overall),
    }
    logger.debug("Interview metrics: %s", metrics)
    return metrics


def _count_by(db: Session, column) -> dict[str, int]:
    return {key: count for key, count in db.query(column, func.count()).group_by(column)}


def get_breakdown(db: Session) -> dict:
    """Hiring funnel, type/status distributions and top performers."""
    candidates = db.query(func.count(Candidate.id)).scalar() or 0
    interviews = db.query(func.count(Interview.id)).scalar() or 0
    evaluations = db.query(func.count(Evaluation.id)).scalar() or 0
    hired = (
        db.query(func.count(Candidate.id))
        .filter(Candidate.status == "hired")
        .scalar()
    ) or 0

    top = (
        db.query(Evaluation, Candidate)
        .outerjoin(Candidate, Evaluation.candidate_id == Candidate.id)
        .filter(Evaluation.overall_score.isnot(None))
        .order_by(Evaluation.overall_score.desc(), Evaluation.created_at.desc())
        .limit(TOP_PERFORMERS)
        .all()
    )

    return {
        "hiring_funnel": [
            {"stage": "Applied", "count": candidates},
            {"stage": "Interviewed", "count": interviews},
            {"stage": "Evaluated", "count": evaluations},
            {"stage": "Hired", "count": hired},
        ],
        "interview_types": _count_by(db, Interview.type),
        "candidate_statuses": _count_by(db, Candidate.status),
        "top_performers": [
            {
                **_evaluation_fields(evaluation),
                "candidate_name": candidate.name if candidate else "Unknown",
                "candidate_position": candidate.position if candidate else "Unknown",
            }
            for evaluation, candidate in top
        ],
    }


def _evaluation_fields(evaluation: Evaluation) -> dict:
    return {c.name: getattr(evaluation, c.name) for c in Evaluation.__table__.columns}


def get_performance_trend(db: Session, limit: int = 30) -> list[dict]:
    """Per-day average scores, oldest first, for the last ``limit`` days with data."""
    evaluations = db.query(Evaluation).order_by(Evaluation.created_at.asc()).all()

    days: "OrderedDict[str, list[Evaluation]]" = OrderedDict()
    for evaluation in evaluations:
        days.setdefault(evaluation.created_at.date().isoformat(), []).append(evaluation)

    trend = [
        {
            "date": day,
            "technical": mean_score(e.technical_score for e in group),
            "communication": mean_score(e.communication_score for e in group),
            "problem_solving": mean_score(e.problem_solving_score for e in group),
            "overall": mean_score(e.overall_score for e in group),
        }
        for day, group in days.items()
    ]
    return trend[-limit:] if limit > 0 else trend
