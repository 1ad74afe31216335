from pydantic import ValidationError

from .logger_utils import logger

# user-facing messages
ERRORS = {
    "no_messages": "Messages are required",
    "no_text": "Text is required",
    "no_file": "No file provided",
    "bad_type": "File must be a PDF",
    "too_large": "File is too large",
    "bad_quiz": "The AI generated an invalid quiz format. Please try again.",
    "bad_question": "The AI generated an invalid question format. Please try again.",
    "server_error": "Internal Server Error",
}


def format_validation_error(error: ValidationError) -> str:
    """
    Flatten a pydantic ValidationError into one line for a JSON error body,
    e.g. ``"messages.0.role: Input should be 'user', 'assistant' or 'system'"``.
    """
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ()))
        message = item.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    logger.debug("Request validation failed: %s", parts)
    return "; ".join(parts) or "Invalid request format"
