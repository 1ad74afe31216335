import io
from typing import IO, Optional

from .ai_client import ai_client
from nexus.infrastructure.config import settings
from nexus.domain.errors import InvalidFileTypeError, UploadTooLargeError
from nexus.utils.pdf_utils import extract_text_from_pdf
from nx_utils.file_utils import is_pdf_upload, read_stream_limited
from nx_utils.logger_utils import logger
from nx_utils.validation import ERRORS


def _uses_ai_extractor() -> bool:
    # OpenAI chat models cannot read PDFs inline, so only Gemini gets the bytes
    return settings.NX_PDF_EXTRACTOR == "ai" and ai_client.provider == "gemini"


def extract_text(stream: IO[bytes], filename: Optional[str], mimetype: Optional[str]) -> str:
    """
    Returns the text of an uploaded PDF.

    Raises InvalidFileTypeError when the upload is neither declared as
    application/pdf nor named *.pdf, and UploadTooLargeError above MAX_UPLOAD_MB.
    """
    if not is_pdf_upload(filename, mimetype):
        logger.error(f"Invalid file type: {mimetype}")
        raise InvalidFileTypeError(ERRORS["bad_type"])

    try:
        data = read_stream_limited(stream, max_size=settings.MAX_UPLOAD_MB * 1024 * 1024)
    except ValueError as e:
        raise UploadTooLargeError(f"{ERRORS['too_large']} (limit {settings.MAX_UPLOAD_MB}MB)") from e

    logger.info(f"Processing PDF: size={len(data)} bytes, type={mimetype}")
    if _uses_ai_extractor():
        text = ai_client.extract_pdf_text(data)
    else:
        text = extract_text_from_pdf(io.BytesIO(data))

    logger.info(f"Text extraction successful ({len(text)} characters)")
    return text
