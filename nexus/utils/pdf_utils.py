from typing import IO
from PyPDF2 import PdfReader, errors
from nx_utils.logger_utils import logger


def extract_text_from_pdf(file_stream: IO[bytes]) -> str:
    """
    Extracts text locally with PyPDF2, page by page, joined with newlines.
    Pages without a text layer are skipped.
    """
    try:
        reader = PdfReader(file_stream)
        if reader.is_encrypted:
            raise ValueError("The PDF is password protected.")
        page_texts = []
        for number, page in enumerate(reader.pages, start=1):
            page_text = page.extract_text() or ""
            if page_text.strip():
                page_texts.append(page_text)
            else:
                logger.debug(f"PDF page {number} has no text layer")
    except errors.PdfReadError as e:
        logger.error(f"Could not read PDF file. It may be encrypted or corrupted: {e}")
        raise ValueError("Invalid or corrupted PDF file.") from e

    if not page_texts:
        logger.warning("PyPDF2 extracted no text. The PDF might be image-based or scanned.")
    return "\n".join(page_texts)
