"""
Centralized configuration — all settings loaded from environment variables
with sensible defaults for local development.

On Vercel (serverless), the filesystem is read-only except /tmp.
We detect the VERCEL environment variable and adjust paths automatically.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# ── Runtime detection ───────────────────────────────────────────────────────
IS_VERCEL: bool = bool(os.getenv("VERCEL"))

# ── Database ────────────────────────────────────────────────────────────────
_default_db = "sqlite:////tmp/interviewguru.db" if IS_VERCEL else "sqlite:///./interviewguru.db"
DATABASE_URL: str = os.getenv("DATABASE_URL", _default_db)

# ── OpenAI (speech-to-text) ─────────────────────────────────────────────────
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
OPENAI_TRANSCRIBE_MODEL: str = os.getenv("OPENAI_TRANSCRIBE_MODEL", "whisper-1")

# ── Ollama / LLM (evaluation + summary) ─────────────────────────────────────
OLLAMA_HOST: str = os.getenv("OLLAMA_HOST", "https://ollama.com")
OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "gpt-oss:120b")
OLLAMA_API_KEY: str = os.getenv("OLLAMA_API_KEY", "")

# ── CORS ────────────────────────────────────────────────────────────────────
# Comma-separated origins, e.g. "http://localhost:5173,https://app.example.com"
_raw_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
CORS_ORIGINS: list[str] = [o.strip() for o in _raw_origins.split(",") if o.strip()]

# ── File Uploads ────────────────────────────────────────────────────────────
_default_upload = "/tmp/uploads" if IS_VERCEL else "uploads"
UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", _default_upload)
MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(100 * 1024 * 1024)))
RESUME_EXTENSIONS: set[str] = {".pdf", ".docx"}

# Bytes per second used to estimate audio length from file size.
AUDIO_BYTES_PER_SECOND: int = 16000

# ── E-mail (SendGrid) ───────────────────────────────────────────────────────
SENDGRID_API_KEY: str = os.getenv("SENDGRID_API_KEY", "")
EMAIL_FROM: str = os.getenv("EMAIL_FROM", "noreply@interviewguru.com")

# ── Logging ─────────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# ── LLM Limits ──────────────────────────────────────────────────────────────
MAX_TRANSCRIPT_CHARS: int = int(os.getenv("MAX_TRANSCRIPT_CHARS", "12000"))
