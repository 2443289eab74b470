"""
Vercel serverless entry point.

Re-exports the FastAPI app so that Vercel's @vercel/python runtime can
discover it. The application itself lives in interviewguru/main.py.
"""
import os
import sys

# Make the 'interviewguru' package importable from the parent directory.
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from interviewguru.main import app  # noqa: E402,F401
