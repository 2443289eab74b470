"""
AI adapters — speech-to-text for recordings, structured scoring and
summaries for transcripts.

Transcription goes to OpenAI's audio endpoint; scoring and summaries go to
the Ollama chat model. Every failure is raised as AIServiceError; callers
decide whether to surface or log it. There is no retry.
"""

import json
import logging
import os
from typing import Any, Optional

from ollama import Client
from openai import OpenAI

from .config import (
    AUDIO_BYTES_PER_SECOND, MAX_TRANSCRIPT_CHARS,
    OLLAMA_API_KEY, OLLAMA_HOST, OLLAMA_MODEL,
    OPENAI_API_KEY, OPENAI_TRANSCRIBE_MODEL,
)
from .utils import round_score, timing_decorator

logger = logging.getLogger(__name__)

# ── Clients ─────────────────────────────────────────────────────────────────
_headers = {"Authorization": f"Bearer {OLLAMA_API_KEY}"} if OLLAMA_API_KEY else {}
client = Client(host=OLLAMA_HOST, headers=_headers)

_openai: Optional[OpenAI] = None


def _openai_client() -> OpenAI:
    global _openai
    if _openai is None:
        if not OPENAI_API_KEY:
            raise AIServiceError("OPENAI_API_KEY is not configured")
        _openai = OpenAI(api_key=OPENAI_API_KEY)
    return _openai


class AIServiceError(Exception):
    """An external AI call failed."""


VALID_RECOMMENDATIONS = {"hire", "no_hire", "maybe"}
SCORE_FIELDS = ("technicalScore", "communicationScore", "problemSolvingScore", "overallScore")

EVALUATION_PROMPT = (
    "You are an expert interview evaluator. Analyze the following interview "
    "transcription and provide scores and feedback.\n\n"
    "Rate on a scale of 1-10:\n"
    "- Technical skills and knowledge\n"
    "- Communication clarity and effectiveness\n"
    "- Problem-solving approach and methodology\n"
    "- Overall interview performance\n\n"
    "Also provide key strengths, areas for improvement and a hiring "
    "recommendation (hire, no_hire, maybe).\n\n"
    "Respond with JSON only in this exact format:\n"
    '{"technicalScore": number, "communicationScore": number, '
    '"problemSolvingScore": number, "overallScore": number, '
    '"strengths": ["strength1"], "weaknesses": ["weakness1"], '
    '"recommendation": "hire|no_hire|maybe"}'
)

SUMMARY_PROMPT = (
    "You are an expert at summarizing interviews. Create a concise, "
    "professional summary highlighting key discussion points, candidate "
    "responses, and notable observations."
)


# ── Helpers ─────────────────────────────────────────────────────────────────

def estimate_duration(size_bytes: int) -> int:
    """Coarse audio length in seconds from the file size."""
    return round(size_bytes / AUDIO_BYTES_PER_SECOND)


def clamp_score(value: Any) -> float:
    """Force a model-supplied score into [1, 10]; junk becomes 1."""
    try:
        score = float(value)
    except (TypeError, ValueError):
        score = 1.0
    if score != score:  # NaN
        score = 1.0
    return round_score(max(1.0, min(10.0, score)))


def _as_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(v) for v in value if str(v).strip()]
    if isinstance(value, str) and value.strip():
        return [value.strip()]
    return []


def parse_json_object(output: Optional[str]) -> dict:
    """Pull the JSON object out of a model reply, ``{}`` when there is none."""
    if not output:
        return {}
    start = output.find("{")
    end = output.rfind("}") + 1
    if start == -1 or end == 0:
        return {}
    try:
        parsed = json.loads(output[start:end])
    except json.JSONDecodeError:
        logger.warning("Model reply was not valid JSON")
        return {}
    return parsed if isinstance(parsed, dict) else {}


def normalize_analysis(raw: dict) -> dict:
    result = {field: clamp_score(raw.get(field)) for field in SCORE_FIELDS}
    result["strengths"] = _as_list(raw.get("strengths"))
    result["weaknesses"] = _as_list(raw.get("weaknesses"))
    recommendation = str(raw.get("recommendation") or "maybe").strip().lower()
    result["recommendation"] = recommendation if recommendation in VALID_RECOMMENDATIONS else "maybe"
    return result


def _chat(messages: list[dict], **kwargs) -> str:
    try:
        response = client.chat(model=OLLAMA_MODEL, messages=messages, **kwargs)
    except Exception as e:
        raise AIServiceError(str(e)) from e
    return response["message"]["content"] or ""


# ── Public API ──────────────────────────────────────────────────────────────

@timing_decorator
def transcribe_audio(audio_path: str) -> dict:
    """Transcribe a stored audio file; returns ``{"text", "duration"}``."""
    try:
        with open(audio_path, "rb") as audio:
            transcription = _openai_client().audio.transcriptions.create(
                file=audio,
                model=OPENAI_TRANSCRIBE_MODEL,
            )
        size = os.path.getsize(audio_path)
    except AIServiceError:
        raise
    except Exception as e:
        logger.error("Transcription of %s failed: %s", audio_path, e)
        raise AIServiceError(f"Failed to transcribe audio: {e}") from e

    return {"text": transcription.text, "duration": estimate_duration(size)}


@timing_decorator
def analyze_interview_performance(transcription: str) -> dict:
    """Score a transcript; scores are clamped into [1, 10] after the call."""
    try:
        output = _chat(
            [
                {"role": "system", "content": EVALUATION_PROMPT},
                {"role": "user", "content": transcription[:MAX_TRANSCRIPT_CHARS]},
            ],
            format="json",
        )
    except AIServiceError as e:
        logger.error("Interview analysis failed: %s", e)
        raise AIServiceError(f"Failed to analyze interview: {e}") from e

    return normalize_analysis(parse_json_object(output))


@timing_decorator
def generate_interview_summary(transcription: str) -> str:
    try:
        output = _chat([
            {"role": "system", "content": SUMMARY_PROMPT},
            {
                "role": "user",
                "content": "Please summarize this interview transcription:\n\n"
                + transcription[:MAX_TRANSCRIPT_CHARS],
            },
        ])
    except AIServiceError as e:
        logger.error("Interview summary failed: %s", e)
        raise AIServiceError(f"Failed to generate summary: {e}") from e

    return output.strip() or "Unable to generate summary"
