from tenacity import Retrying, stop_after_attempt, wait_exponential
from .logger_utils import logger


def on_retry_callback(retry_state):
    """Callback function to log retry attempts."""
    logger.warning(
        f"Retrying AI call, attempt {retry_state.attempt_number} "
        f"after {retry_state.seconds_since_start:.2f}s..."
    )


def build_retrying(max_attempts: int = 1) -> Retrying:
    """
    Retry controller for non-streaming AI calls.

    With ``max_attempts=1`` (the default) the call runs exactly once and its
    exception is re-raised unchanged.
    """
    return Retrying(
        wait=wait_exponential(multiplier=1, min=1, max=10),
        stop=stop_after_attempt(max(1, max_attempts)),
        before_sleep=on_retry_callback,
        reraise=True,
    )
