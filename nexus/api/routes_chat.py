from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from nexus.domain.models.api_models import ChatRequest
from nexus.services import chat_service
from nexus.utils.sse import SSE_HEADERS
from nx_utils.logger_utils import logger
from nx_utils.validation import ERRORS, format_validation_error

chat_bp = Blueprint('chat_bp', __name__)


def _wants_stream() -> bool:
    # Only an explicit text/event-stream entry counts; */* keeps the JSON reply
    return "text/event-stream" in request.accept_mimetypes.values()


@chat_bp.route('/chat', methods=['POST'])
def chat():
    """
    Relays a conversation to the AI provider.

    Streams SSE frames when the client accepts text/event-stream,
    otherwise returns the whole reply as {"response": ...}.
    """
    body = request.get_json(silent=True)
    messages = body.get("messages") if isinstance(body, dict) else None
    if not messages or not isinstance(messages, list):
        return jsonify({"error": ERRORS["no_messages"]}), 400

    try:
        req_data = ChatRequest.model_validate(body)
    except ValidationError as e:
        return jsonify({"error": format_validation_error(e)}), 400

    try:
        if _wants_stream():
            frames = chat_service.open_chat_stream(req_data.messages, with_search=req_data.with_search)
            return Response(frames, content_type="text/event-stream", headers=SSE_HEADERS)

        response_text = chat_service.generate_chat_response(req_data.messages, with_search=req_data.with_search)
        return jsonify({"response": response_text}), 200
    except Exception as e:
        logger.error(f"Error in chat API: {e}", exc_info=True)
        return jsonify({"error": str(e) or "Failed to generate response"}), 500
