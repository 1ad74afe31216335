from typing import IO, Optional

from .logger_utils import logger

PDF_MIMETYPE = "application/pdf"

# per-file size limit (10MB)
MAX_FILE_SIZE_BYTES: int = 10 * 1024 * 1024

_CHUNK_SIZE_BYTES: int = 64 * 1024  # for streaming reads


def is_pdf_upload(filename: Optional[str], mimetype: Optional[str]) -> bool:
    """A file counts as PDF when its declared MIME type or its suffix says so."""
    if mimetype == PDF_MIMETYPE:
        return True
    return (filename or "").lower().endswith(".pdf")


def read_stream_limited(stream: IO[bytes], max_size: int = MAX_FILE_SIZE_BYTES) -> bytes:
    """
    Read an upload into memory, enforcing a size limit.
    Does not log filename or content.
    """
    chunks = []
    total = 0
    for chunk in iter(lambda: stream.read(_CHUNK_SIZE_BYTES), b""):
        total += len(chunk)
        if total > max_size:
            logger.debug("Upload rejected: size exceeded limit bytes=%d", max_size)
            raise ValueError("oversize")
        chunks.append(chunk)

    logger.debug("Read upload into memory (size=%d)", total)
    return b"".join(chunks)
