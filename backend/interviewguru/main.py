"""
FastAPI application entry point.

Thin request parsing and response shaping around the storage, analytics,
AI and notification modules. Handlers are sync so SQLAlchemy work runs on
the threadpool.
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, Request, Response, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import ai_service, analytics, notifier, storage
from .ai_service import AIServiceError
from .config import CORS_ORIGINS, LOG_LEVEL, MAX_UPLOAD_BYTES, RESUME_EXTENSIONS, UPLOAD_DIR
from .database import get_db, init_db
from .schemas import (
    AnalyzeRequest, Breakdown, CandidateCreate, CandidateOut, CandidateUpdate,
    EvaluationCreate, EvaluationOut, EvaluationUpdate, InterviewCreate, InterviewOut,
    InterviewUpdate, Metrics, NotificationCreate, NotificationOut, PerformancePoint,
    RecordingOut,
)
from .utils import UploadTooLarge, remove_file, save_upload

# ── Logging ─────────────────────────────────────────────────────────────────
logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown hook."""
    logger.info("Creating database tables...")
    init_db()
    os.makedirs(UPLOAD_DIR, exist_ok=True)
    yield
    logger.info("Shutting down.")


app = FastAPI(
    title="InterviewGuru API",
    version="1.0.0",
    lifespan=lifespan,
)


# ── Error handlers ──────────────────────────────────────────────────────────
@app.exception_handler(RequestValidationError)
async def validation_failed(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{loc}: {error.get('msg')}" if loc else error.get("msg", ""))
    return JSONResponse(status_code=400, content={"detail": "; ".join(messages)})


@app.exception_handler(IntegrityError)
async def integrity_failed(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=400, content={"detail": str(exc.orig)})


@app.exception_handler(AIServiceError)
async def ai_service_failed(request: Request, exc: AIServiceError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def catch_all(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    return JSONResponse(
        status_code=500,
        content={"error": "internal server error", "detail": str(exc)},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# ── Helpers ─────────────────────────────────────────────────────────────────

def _found(obj, entity: str):
    if obj is None:
        raise HTTPException(status_code=404, detail=f"{entity} not found")
    return obj


def _store(upload: UploadFile) -> tuple[str, int]:
    try:
        return save_upload(upload.file, upload.filename, UPLOAD_DIR, MAX_UPLOAD_BYTES)
    except UploadTooLarge as e:
        raise HTTPException(status_code=413, detail=str(e))


def _check_resume_format(upload: UploadFile) -> None:
    ext = os.path.splitext(upload.filename or "")[1].lower()
    if ext not in RESUME_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported resume format. Allowed: {', '.join(sorted(RESUME_EXTENSIONS))}",
        )


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {value}")


# ── Routes ──────────────────────────────────────────────────────────────────

@app.get("/")
def health_check():
    return {"message": "InterviewGuru API", "status": "running"}


# Candidates

@app.get("/api/candidates", response_model=list[CandidateOut])
def list_candidates(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return storage.list_candidates(db, limit=limit, offset=offset, search=search)


@app.get("/api/candidates/{candidate_id}", response_model=CandidateOut)
def get_candidate(candidate_id: str, db: Session = Depends(get_db)):
    return _found(storage.get_candidate(db, candidate_id), "Candidate")


@app.post("/api/candidates", response_model=CandidateOut, status_code=201)
def create_candidate(payload: CandidateCreate, db: Session = Depends(get_db)):
    return storage.create_candidate(db, payload.model_dump())


@app.put("/api/candidates/{candidate_id}", response_model=CandidateOut)
def update_candidate(candidate_id: str, payload: CandidateUpdate, db: Session = Depends(get_db)):
    candidate = _found(storage.get_candidate(db, candidate_id), "Candidate")
    return storage.update_candidate(db, candidate, payload.model_dump(exclude_unset=True))


@app.delete("/api/candidates/{candidate_id}", status_code=204)
def delete_candidate(candidate_id: str, db: Session = Depends(get_db)):
    storage.delete_candidate(db, candidate_id)
    return Response(status_code=204)


@app.post("/api/candidates/{candidate_id}/resume", response_model=CandidateOut)
def upload_resume(candidate_id: str, resume: UploadFile = File(...), db: Session = Depends(get_db)):
    candidate = _found(storage.get_candidate(db, candidate_id), "Candidate")

    _check_resume_format(resume)
    path, _ = _store(resume)
    return storage.update_candidate(db, candidate, {"resume": path})


# Interviews

@app.get("/api/interviews", response_model=list[InterviewOut])
def list_interviews(
    candidate_id: Optional[str] = Query(None, alias="candidateId"),
    status: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return storage.list_interviews(db, candidate_id=candidate_id, status=status)


@app.get("/api/interviews/upcoming/{day}", response_model=list[InterviewOut])
def upcoming_interviews(day: str, db: Session = Depends(get_db)):
    return storage.get_upcoming_interviews(db, _parse_day(day))


@app.get("/api/interviews/{interview_id}", response_model=InterviewOut)
def get_interview(interview_id: str, db: Session = Depends(get_db)):
    return _found(storage.get_interview(db, interview_id), "Interview")


@app.post("/api/interviews", response_model=InterviewOut, status_code=201)
def create_interview(payload: InterviewCreate, db: Session = Depends(get_db)):
    candidate = _found(storage.get_candidate(db, payload.candidate_id), "Candidate")
    interview = storage.create_interview(db, payload.model_dump())

    notification = notifier.notify_interview_scheduled(db, interview, candidate)
    if not notification.sent:
        logger.warning("Interview %s created but notification %s was not sent", interview.id, notification.id)
    return interview


@app.put("/api/interviews/{interview_id}", response_model=InterviewOut)
def update_interview(interview_id: str, payload: InterviewUpdate, db: Session = Depends(get_db)):
    interview = _found(storage.get_interview(db, interview_id), "Interview")
    changes = payload.model_dump(exclude_unset=True)
    if "candidate_id" in changes:
        _found(storage.get_candidate(db, changes["candidate_id"]), "Candidate")
    return storage.update_interview(db, interview, changes)


@app.delete("/api/interviews/{interview_id}", status_code=204)
def delete_interview(interview_id: str, db: Session = Depends(get_db)):
    storage.delete_interview(db, interview_id)
    return Response(status_code=204)


# Recordings

@app.get("/api/recordings", response_model=list[RecordingOut])
def list_recordings(
    interview_id: Optional[str] = Query(None, alias="interviewId"),
    db: Session = Depends(get_db),
):
    return storage.list_recordings(db, interview_id=interview_id)


@app.get("/api/recordings/{recording_id}", response_model=RecordingOut)
def get_recording(recording_id: str, db: Session = Depends(get_db)):
    return _found(storage.get_recording(db, recording_id), "Recording")


@app.post("/api/recordings", response_model=RecordingOut, status_code=201)
def upload_recording(
    interview_id: str = Form(..., alias="interviewId"),
    video: Optional[UploadFile] = File(None),
    audio: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
):
    _found(storage.get_interview(db, interview_id), "Interview")

    data: dict = {"interview_id": interview_id}
    saved: list[str] = []
    try:
        for field, upload in (("video_path", video), ("audio_path", audio)):
            if upload is not None and upload.filename:
                path, size = _store(upload)
                saved.append(path)
                data[field] = path
                data["size"] = data.get("size", 0) + size
    except HTTPException:
        for path in saved:
            remove_file(path)
        raise

    recording = storage.create_recording(db, data)

    if recording.audio_path:
        try:
            result = ai_service.transcribe_audio(recording.audio_path)
            recording = storage.update_recording(db, recording, {
                "transcription": result["text"],
                "duration": result["duration"],
            })
        except AIServiceError:
            logger.exception("Transcription failed for recording %s", recording.id)

    return recording


@app.post("/api/recordings/{recording_id}/transcribe", response_model=RecordingOut)
def transcribe_recording(recording_id: str, db: Session = Depends(get_db)):
    recording = storage.get_recording(db, recording_id)
    if recording is None or not recording.audio_path:
        raise HTTPException(status_code=404, detail="Recording or audio file not found")

    result = ai_service.transcribe_audio(recording.audio_path)
    return storage.update_recording(db, recording, {
        "transcription": result["text"],
        "duration": result["duration"],
    })


# Evaluations

@app.get("/api/evaluations", response_model=list[EvaluationOut])
def list_evaluations(
    candidate_id: Optional[str] = Query(None, alias="candidateId"),
    interview_id: Optional[str] = Query(None, alias="interviewId"),
    db: Session = Depends(get_db),
):
    return storage.list_evaluations(db, candidate_id=candidate_id, interview_id=interview_id)


@app.post("/api/evaluations/analyze", response_model=EvaluationOut)
def analyze_evaluation(payload: AnalyzeRequest, db: Session = Depends(get_db)):
    if not payload.transcription or not payload.transcription.strip():
        raise HTTPException(status_code=400, detail="Transcription is required")
    _found(storage.get_interview(db, payload.interview_id), "Interview")
    _found(storage.get_candidate(db, payload.candidate_id), "Candidate")

    analysis = ai_service.analyze_interview_performance(payload.transcription)
    feedback = ai_service.generate_interview_summary(payload.transcription)

    return storage.create_evaluation(db, {
        "interview_id": payload.interview_id,
        "candidate_id": payload.candidate_id,
        "evaluator_email": payload.evaluator_email,
        "technical_score": analysis["technicalScore"],
        "communication_score": analysis["communicationScore"],
        "problem_solving_score": analysis["problemSolvingScore"],
        "overall_score": analysis["overallScore"],
        "strengths": ", ".join(analysis["strengths"]),
        "weaknesses": ", ".join(analysis["weaknesses"]),
        "recommendation": analysis["recommendation"],
        "feedback": feedback,
    })


@app.get("/api/evaluations/{evaluation_id}", response_model=EvaluationOut)
def get_evaluation(evaluation_id: str, db: Session = Depends(get_db)):
    return _found(storage.get_evaluation(db, evaluation_id), "Evaluation")


@app.post("/api/evaluations", response_model=EvaluationOut, status_code=201)
def create_evaluation(payload: EvaluationCreate, db: Session = Depends(get_db)):
    _found(storage.get_interview(db, payload.interview_id), "Interview")
    _found(storage.get_candidate(db, payload.candidate_id), "Candidate")
    return storage.create_evaluation(db, payload.model_dump())


@app.put("/api/evaluations/{evaluation_id}", response_model=EvaluationOut)
def update_evaluation(evaluation_id: str, payload: EvaluationUpdate, db: Session = Depends(get_db)):
    evaluation = _found(storage.get_evaluation(db, evaluation_id), "Evaluation")
    return storage.update_evaluation(db, evaluation, payload.model_dump(exclude_unset=True))


# Analytics

@app.get("/api/analytics/metrics", response_model=Metrics)
def interview_metrics(db: Session = Depends(get_db)):
    return analytics.get_interview_metrics(db)


@app.get("/api/analytics/breakdown", response_model=Breakdown)
def analytics_breakdown(db: Session = Depends(get_db)):
    return analytics.get_breakdown(db)


@app.get("/api/analytics/performance", response_model=list[PerformancePoint])
def performance_trend(limit: int = Query(30, ge=1, le=365), db: Session = Depends(get_db)):
    return analytics.get_performance_trend(db, limit=limit)


# Notifications

@app.get("/api/notifications", response_model=list[NotificationOut])
def list_notifications(
    recipient_email: Optional[str] = Query(None, alias="recipientEmail"),
    sent: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    return storage.list_notifications(db, recipient_email=recipient_email, sent=sent)


@app.post("/api/notifications", response_model=NotificationOut, status_code=201)
def create_notification(payload: NotificationCreate, db: Session = Depends(get_db)):
    notification = storage.create_notification(db, payload.model_dump())
    return notifier.dispatch(db, notification)
