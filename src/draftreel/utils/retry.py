"""Retry decorators using tenacity."""

from __future__ import annotations

from tenacity import (
    retry,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)


def retry_io(max_attempts: int = 3):
    """Retry decorator for local storage calls that can fail transiently.

    Works on both plain functions and coroutines. Missing files are not
    transient and are raised straight away.
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
        retry=(
            retry_if_exception_type(OSError)
            & retry_if_not_exception_type(FileNotFoundError)
        ),
        reraise=True,
    )
