from flask import Blueprint, jsonify, request

from nexus.domain.errors import InvalidFileTypeError, UploadTooLargeError
from nexus.services import pdf_service
from nx_utils.logger_utils import logger
from nx_utils.validation import ERRORS

extract_bp = Blueprint('extract_bp', __name__)


@extract_bp.route('/extractText', methods=['POST'])
def extract_text():
    """Returns the text of an uploaded PDF (multipart field "file")."""
    logger.info("Extract text API called")
    file_storage = request.files.get("file")
    if file_storage is None:
        logger.error("No file provided in request")
        return jsonify({"error": ERRORS["no_file"]}), 400

    try:
        text = pdf_service.extract_text(file_storage.stream, file_storage.filename, file_storage.mimetype)
        return jsonify({"text": text}), 200
    except InvalidFileTypeError as e:
        return jsonify({"error": str(e)}), 400
    except UploadTooLargeError as e:
        logger.warning(f"Rejected upload: {e}")
        return jsonify({"error": str(e)}), 413
    except Exception as e:
        logger.error(f"Error extracting text from PDF: {e}", exc_info=True)
        return jsonify({"error": str(e) or "Failed to extract text from PDF"}), 500
