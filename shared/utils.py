"""Shared utility functions."""
import math
import uuid
from datetime import datetime, timezone


def generate_job_id() -> str:
    """Generate a unique generation job ID."""
    return f"gen_{uuid.uuid4().hex[:12]}"


def generate_profile_id() -> str:
    """Generate a unique voice profile ID."""
    return f"vp_{uuid.uuid4().hex[:12]}"


def generate_task_id() -> str:
    """Generate a unique task ID."""
    return f"task_{uuid.uuid4().hex[:12]}"


def get_utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def calculate_exponential_backoff(attempt: int, base_delay: float = 1.0, max_delay: float = 60.0) -> float:
    """Calculate exponential backoff delay.

    ``attempt`` is the zero-based index of the retry, so the first retry waits
    ``base_delay`` and every following one doubles it.
    """
    delay = base_delay * (2 ** attempt)
    return min(delay, max_delay)


def estimate_token_usage(text: str) -> int:
    """Rough token estimate used for job bookkeeping (four characters per token)."""
    return math.ceil(len(text) / 4)


def unique_in_order(values) -> list:
    """Drop duplicates while keeping first-seen order."""
    seen = set()
    result = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result
