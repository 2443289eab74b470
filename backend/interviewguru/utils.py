"""
Shared utilities — timing decorator, performance logger, score rounding
and upload helpers.
"""

import logging
import os
import time
import uuid
from decimal import Decimal, ROUND_HALF_UP
from functools import wraps
from typing import Callable, Any, BinaryIO

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def timing_decorator(func: Callable) -> Callable:
    """Log how long an external call took, warning on slow ones."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        start = time.time()
        success = False
        try:
            result = func(*args, **kwargs)
            success = True
            return result
        finally:
            log_performance_metrics(func.__name__, time.time() - start, success)

    return wrapper


def log_performance_metrics(
    operation: str, duration: float, success: bool = True,
) -> None:
    """Log a performance measurement with severity based on duration."""
    outcome = "ok" if success else "failed"

    if duration < 5:
        logger.info("%s %s in %.2fs", operation, outcome, duration)
    elif duration < 30:
        logger.warning("%s %s in %.2fs (slow)", operation, outcome, duration)
    else:
        logger.error("%s %s in %.2fs (very slow)", operation, outcome, duration)


def round_score(value: float) -> float:
    """Round to one decimal, halves going up (7.25 -> 7.3)."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class UploadTooLarge(Exception):
    """Raised when an upload exceeds the configured byte limit."""


def save_upload(source: BinaryIO, filename: str, upload_dir: str, max_bytes: int) -> tuple[str, int]:
    """
    Copy an uploaded stream into ``upload_dir`` under a unique name.

    Returns ``(path, size)``. Copying stops as soon as more than
    ``max_bytes`` have been read, and the partial file is removed.
    """
    os.makedirs(upload_dir, exist_ok=True)
    safe_name = os.path.basename(filename or "upload")
    path = os.path.join(upload_dir, f"{uuid.uuid4().hex}_{safe_name}")

    size = 0
    with open(path, "wb") as buf:
        while True:
            chunk = source.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > max_bytes:
                break
            buf.write(chunk)

    if size > max_bytes:
        remove_file(path)
        raise UploadTooLarge(f"{safe_name} exceeds the {max_bytes // (1024 * 1024)}MB limit")

    logger.info("Saved upload: %s -> %s (%d bytes)", filename, path, size)
    return path, size


def remove_file(path: str) -> None:
    try:
        if os.path.exists(path):
            os.remove(path)
    except OSError:
        logger.exception("Failed to clean up %s", path)
