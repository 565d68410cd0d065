"""
Resilience Helpers.

Structured logging hooks for tenacity retries.

Usage:
    from tenacity import AsyncRetrying, stop_after_attempt
    from notes_api.core.resilience import log_retry

    async for attempt in AsyncRetrying(stop=stop_after_attempt(3), before_sleep=log_retry):
        with attempt:
            await connect()
"""

from typing import Any

from notes_api.core.logging import get_logger

logger = get_logger(__name__)


def log_retry(retry_state: Any) -> None:
    """Tenacity before_sleep callback that emits structured retry events.

    Args:
        retry_state: tenacity.RetryCallState instance
    """
    error = None
    if retry_state.outcome and retry_state.outcome.failed:
        error = str(retry_state.outcome.exception())

    fn_name = getattr(retry_state.fn, "__name__", "block")
    next_sleep = retry_state.next_action.sleep if retry_state.next_action else None

    logger.warning(
        f"Retrying {fn_name} (attempt {retry_state.attempt_number})",
        extra={
            "resilience_event": "retry_attempt",
            "attempt": retry_state.attempt_number,
            "next_sleep_seconds": next_sleep,
            "error": error,
        },
    )
