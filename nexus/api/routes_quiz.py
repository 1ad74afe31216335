from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from nexus.domain.models.api_models import FallbackQuizRequest, GenerateQuizRequest
from nexus.services import quiz_service
from nx_utils.logger_utils import logger
from nx_utils.validation import ERRORS, format_validation_error

quiz_bp = Blueprint('quiz_bp', __name__)


@quiz_bp.route('/generateQuiz', methods=['POST'])
def generate_quiz():
    """Generates a quiz from extracted document text."""
    logger.info("Generate quiz API called")
    body = request.get_json(silent=True)
    text = body.get("text") if isinstance(body, dict) else None
    if not text or not isinstance(text, str):
        logger.error("Text is required but was not provided")
        return jsonify({"error": ERRORS["no_text"]}), 400

    try:
        req_data = GenerateQuizRequest.model_validate(body)
    except ValidationError as e:
        return jsonify({"error": format_validation_error(e)}), 400

    try:
        result = quiz_service.generate_quiz_from_text(
            req_data.text,
            req_data.num_questions,
            quiz_type=req_data.quiz_type,
            language=req_data.language,
            title=req_data.title,
        )
    except Exception as e:
        logger.error(f"Error in quiz generation: {e}", exc_info=True)
        return jsonify({
            "error": str(e) or "Failed to generate quiz. Please try again with a different document."
        }), 500

    if not result.ok:
        return jsonify({"error": result.error}), 500
    return jsonify(result.quiz.to_dict()), 200


@quiz_bp.route('/fallbackQuiz', methods=['POST'])
def fallback_quiz():
    """Returns a placeholder quiz built without the AI provider."""
    try:
        req_data = FallbackQuizRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        return jsonify({"error": format_validation_error(e)}), 400

    quiz = quiz_service.create_fallback_quiz(req_data.num_questions)
    logger.info(f"Built fallback quiz with {len(quiz.questions)} questions")
    return jsonify(quiz.to_dict()), 200
