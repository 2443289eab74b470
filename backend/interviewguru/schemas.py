"""
Request / response schemas.

JSON uses camelCase (``candidateId``, ``scheduledAt``) while the Python side
stays snake_case. ``*Update`` models carry every field as optional so a PUT
body can hold any subset; only the fields actually sent are applied.
"""

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from .utils import round_score

CandidateStatus = Literal["active", "hired", "rejected", "withdrawn"]
InterviewStatus = Literal["scheduled", "in_progress", "completed", "cancelled"]
InterviewType = Literal["technical", "behavioral", "final", "phone"]
Recommendation = Literal["hire", "no_hire", "maybe"]

Score = Annotated[float, Field(ge=0, le=10)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _to_utc_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _reject_null(value):
    if value is None:
        raise ValueError("may not be null")
    return value


# ── Candidates ──────────────────────────────────────────────────────────────

class CandidateCreate(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    position: str = Field(min_length=1)
    experience: Optional[int] = Field(default=None, ge=0)
    skills: list[str] = Field(default_factory=list)
    resume: Optional[str] = None
    notes: Optional[str] = None
    status: CandidateStatus = "active"


class CandidateUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    position: Optional[str] = Field(default=None, min_length=1)
    experience: Optional[int] = Field(default=None, ge=0)
    skills: Optional[list[str]] = None
    resume: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[CandidateStatus] = None

    @field_validator("name", "email", "position", "skills", "status")
    @classmethod
    def _not_null(cls, value):
        return _reject_null(value)


class CandidateOut(CamelModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    position: str
    experience: Optional[int] = None
    skills: list[str] = Field(default_factory=list)
    resume: Optional[str] = None
    notes: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime

    @field_validator("skills", mode="before")
    @classmethod
    def _skills_default(cls, value):
        return value or []


# ── Interviews ──────────────────────────────────────────────────────────────

class InterviewCreate(CamelModel):
    candidate_id: str
    title: str = Field(min_length=1)
    scheduled_at: datetime
    duration: int = Field(gt=0)
    status: InterviewStatus = "scheduled"
    type: InterviewType
    location: Optional[str] = None
    interviewer_email: EmailStr
    notes: Optional[str] = None

    @field_validator("scheduled_at")
    @classmethod
    def _normalize_time(cls, value: datetime) -> datetime:
        return _to_utc_naive(value)


class InterviewUpdate(CamelModel):
    candidate_id: Optional[str] = None
    title: Optional[str] = Field(default=None, min_length=1)
    scheduled_at: Optional[datetime] = None
    duration: Optional[int] = Field(default=None, gt=0)
    status: Optional[InterviewStatus] = None
    type: Optional[InterviewType] = None
    location: Optional[str] = None
    interviewer_email: Optional[EmailStr] = None
    notes: Optional[str] = None

    @field_validator(
        "candidate_id", "title", "scheduled_at", "duration",
        "status", "type", "interviewer_email",
    )
    @classmethod
    def _not_null(cls, value):
        return _reject_null(value)

    @field_validator("scheduled_at")
    @classmethod
    def _normalize_time(cls, value: datetime) -> datetime:
        return _to_utc_naive(value)


class InterviewOut(CamelModel):
    id: str
    candidate_id: str
    title: str
    scheduled_at: datetime
    duration: int
    status: str
    type: str
    location: Optional[str] = None
    interviewer_email: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ── Recordings ──────────────────────────────────────────────────────────────

class RecordingOut(CamelModel):
    id: str
    interview_id: str
    video_path: Optional[str] = None
    audio_path: Optional[str] = None
    transcription: Optional[str] = None
    duration: Optional[int] = None
    size: Optional[int] = None
    created_at: datetime


# ── Evaluations ─────────────────────────────────────────────────────────────

class EvaluationCreate(CamelModel):
    interview_id: str
    candidate_id: str
    technical_score: Optional[Score] = None
    communication_score: Optional[Score] = None
    problem_solving_score: Optional[Score] = None
    overall_score: Optional[Score] = None
    strengths: Optional[str] = None
    weaknesses: Optional[str] = None
    recommendation: Optional[Recommendation] = None
    feedback: Optional[str] = None
    evaluator_email: EmailStr

    @field_validator(
        "technical_score", "communication_score",
        "problem_solving_score", "overall_score",
    )
    @classmethod
    def _one_decimal(cls, value: Optional[float]) -> Optional[float]:
        return round_score(value) if value is not None else value


class EvaluationUpdate(CamelModel):
    technical_score: Optional[Score] = None
    communication_score: Optional[Score] = None
    problem_solving_score: Optional[Score] = None
    overall_score: Optional[Score] = None
    strengths: Optional[str] = None
    weaknesses: Optional[str] = None
    recommendation: Optional[Recommendation] = None
    feedback: Optional[str] = None
    evaluator_email: Optional[EmailStr] = None

    @field_validator("evaluator_email")
    @classmethod
    def _not_null(cls, value):
        return _reject_null(value)

    @field_validator(
        "technical_score", "communication_score",
        "problem_solving_score", "overall_score",
    )
    @classmethod
    def _one_decimal(cls, value: Optional[float]) -> Optional[float]:
        return round_score(value) if value is not None else value


class EvaluationOut(CamelModel):
    id: str
    interview_id: str
    candidate_id: str
    technical_score: Optional[float] = None
    communication_score: Optional[float] = None
    problem_solving_score: Optional[float] = None
    overall_score: Optional[float] = None
    strengths: Optional[str] = None
    weaknesses: Optional[str] = None
    recommendation: Optional[str] = None
    feedback: Optional[str] = None
    evaluator_email: str
    created_at: datetime
    updated_at: datetime


class AnalyzeRequest(CamelModel):
    transcription: Optional[str] = None
    interview_id: str
    candidate_id: str
    evaluator_email: EmailStr


# ── Notifications ───────────────────────────────────────────────────────────

class NotificationCreate(CamelModel):
    recipient_email: EmailStr
    type: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    content: str = Field(min_length=1)

    @field_validator("subject")
    @classmethod
    def _single_line(cls, value: str) -> str:
        if "\r" in value or "\n" in value:
            raise ValueError("subject must be a single line")
        return value


class NotificationOut(CamelModel):
    id: str
    recipient_email: str
    type: str
    subject: str
    content: str
    sent: bool
    sent_at: Optional[datetime] = None
    created_at: datetime


# ── Analytics ───────────────────────────────────────────────────────────────

class Metrics(CamelModel):
    total_interviews: int
    active_candidates: int
    weekly_interviews: int
    average_score: float


class FunnelStage(CamelModel):
    stage: str
    count: int


class TopPerformer(EvaluationOut):
    candidate_name: str
    candidate_position: str


class Breakdown(CamelModel):
    hiring_funnel: list[FunnelStage]
    interview_types: dict[str, int]
    candidate_statuses: dict[str, int]
    top_performers: list[TopPerformer]


class PerformancePoint(CamelModel):
    date: str
    technical: float
    communication: float
    problem_solving: float
    overall: float
