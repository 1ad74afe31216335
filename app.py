import os
from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from nexus.infrastructure.config import settings
from nexus.services.ai_client import ai_client
from nx_utils.logger_utils import logger, set_log_level
from nx_utils.validation import ERRORS

# Import Blueprints
from nexus.api.routes_chat import chat_bp
from nexus.api.routes_extract import extract_bp
from nexus.api.routes_quiz import quiz_bp


def create_app():
    """Application factory for Flask."""
    app = Flask(__name__)
    set_log_level(settings.LOG_LEVEL)

    # --- Core Configuration ---
    app.config["DEBUG"] = settings.DEBUG
    # slightly above the per-file limit so the PDF route can answer with its own message
    app.config["MAX_CONTENT_LENGTH"] = (settings.MAX_UPLOAD_MB + 1) * 1024 * 1024
    app.json.ensure_ascii = False

    origins = [o.strip() for o in settings.NX_CORS_ORIGINS.split(",") if o.strip()] or "*"
    CORS(app, resources={rf"{settings.NX_API_PREFIX}/*": {"origins": origins}})

    # --- Blueprints Registration ---
    app.register_blueprint(chat_bp, url_prefix=settings.NX_API_PREFIX)
    app.register_blueprint(extract_bp, url_prefix=settings.NX_API_PREFIX)
    app.register_blueprint(quiz_bp, url_prefix=settings.NX_API_PREFIX)

    # --- Request Hooks ---
    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        return response

    # --- Health Checks ---
    @app.route('/health')
    def health_check():
        return jsonify({"status": "healthy"}), 200

    @app.route('/health/detailed')
    def detailed_health_check():
        configured = ai_client.is_configured()
        health_status = {
            "status": "healthy" if configured else "degraded",
            "version": settings.VERSION,
            "components": {
                "ai_provider": {
                    "provider": ai_client.provider,
                    "configured": configured,
                    "pdf_extractor": settings.NX_PDF_EXTRACTOR,
                },
            },
        }
        return jsonify(health_status), 200 if configured else 503

    # --- Error Handling ---
    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        logger.warning(f"{error.name} error for path: {request.path}")
        return jsonify({"error": error.name}), error.code

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(error):
        logger.warning(f"Request body too large for path: {request.path}")
        return jsonify({"error": f"File is too large (limit {settings.MAX_UPLOAD_MB}MB)"}), 413

    @app.errorhandler(Exception)
    def handle_exception(error):
        logger.error(f"Unhandled exception for path {request.path}: {error}", exc_info=True)
        return jsonify({"error": ERRORS["server_error"]}), 500

    logger.info(f"{settings.APP_NAME} Flask App created successfully in {settings.FLASK_ENV} mode.")
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=int(os.environ.get("PORT", 5000)))
