"""Application factory."""

import os
import uuid
from http import HTTPStatus

from flask import Flask, jsonify, g, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from routes.auth import auth_bp
from routes.posts import posts_bp
from routes.users import users_bp
from services.container import build_services
from services.tokens import PURPOSE_CLAIM, SESSION
from utils.errors import ServiceError

migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.config.get("JWT_SECRET_KEY"):
        raise RuntimeError("JWT_SECRET_KEY must be set before the application starts.")

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    build_services(app)

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Rate limiting
    storage_uri = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
    headers_enabled = app.config.get("RATELIMIT_HEADERS_ENABLED", True)
    key_prefix = app.config.get("RATELIMIT_KEY_PREFIX") or str(uuid.uuid4())

    global limiter
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "60 per minute")],
        storage_uri=storage_uri,
        headers_enabled=headers_enabled,
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(posts_bp, url_prefix="/blog")
    app.register_blueprint(users_bp, url_prefix="/users")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    # Errors
    _register_jwt_callbacks()
    _register_error_handlers(app)

    return app


def _error_response(status: int, error: str, message: str):
    request_id = g.get("request_id") or str(uuid.uuid4())
    response = jsonify(
        {
            "success": False,
            "message": message,
            "error": error,
            "request_id": request_id,
        }
    )
    response.status_code = status
    response.headers.setdefault("X-Request-ID", request_id)
    return response


def _register_jwt_callbacks() -> None:
    """Render bearer-token failures as 401 envelopes."""

    unauthorized = HTTPStatus.UNAUTHORIZED

    @jwt.token_verification_loader
    def _is_session_token(jwt_header, jwt_data):
        # Verification and reset tokens are signed with the same key.
        return jwt_data.get(PURPOSE_CLAIM, SESSION) == SESSION

    @jwt.token_verification_failed_loader
    def _not_a_session_token(jwt_header, jwt_data):
        return _error_response(unauthorized, unauthorized.phrase, "Not a session token")

    @jwt.unauthorized_loader
    def _missing_token(reason):
        return _error_response(unauthorized, unauthorized.phrase, "Not authenticated")

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return _error_response(unauthorized, unauthorized.phrase, "Invalid token")

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_data):
        return _error_response(unauthorized, unauthorized.phrase, "Token has expired")


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():  # pragma: no cover
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):  # pragma: no cover
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(ServiceError)
    def _handle_service_error(error: ServiceError):
        if error.status_code >= 500:
            app.logger.exception("Service failure", exc_info=error)
            return _error_response(
                error.status_code,
                error.kind.status.phrase,
                "An unexpected error occurred.",
            )
        return _error_response(error.status_code, error.kind.status.phrase, error.message)

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        response = _error_response(
            error.code or 500,
            getattr(error, "name", "Error"),
            error.description,
        )
        for header, value in error.get_headers():
            if header.lower() != "content-type":
                response.headers.setdefault(header, value)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        app.logger.exception("Unhandled application error", exc_info=error)
        return _error_response(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            "An unexpected error occurred.",
        )


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
