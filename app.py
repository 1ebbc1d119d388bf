"""
HTTP entry point
Flask app exposing the orchestrator behind the rate limiter.
"""
from flask import Flask, g, jsonify, request

from config import settings
from orchestration import (
    Orchestrator,
    RateLimiter,
    RequestCancelledError,
    get_orchestrator,
    get_rate_limiter,
)
from utils import get_logger

logger = get_logger(__name__)


def create_app(orchestrator: Orchestrator | None = None, rate_limiter: RateLimiter | None = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)

    def _orchestrator() -> Orchestrator:
        return orchestrator or get_orchestrator()

    def _rate_limiter() -> RateLimiter:
        return rate_limiter or get_rate_limiter()

    @app.before_request
    def admit_request():
        if request.endpoint == "health":
            return None

        decision = _rate_limiter().admit(request.remote_addr or "unknown")
        g.rate_limit = decision
        if not decision.allowed:
            return jsonify(decision.rejection_payload()), 429
        return None

    @app.after_request
    def add_rate_limit_headers(response):
        decision = g.get("rate_limit")
        if decision is not None:
            response.headers.update(decision.headers())
        return response

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.post("/chat")
    def chat():
        payload = request.get_json(silent=True) or {}
        message = payload.get("message")
        if not isinstance(message, str) or not message.strip():
            return jsonify({"error": "message is required"}), 400

        try:
            response = _orchestrator().process_message_with_timeout(message)
        except RequestCancelledError as e:
            logger.warning(f"Chat request from {request.remote_addr} timed out: {e}")
            return jsonify({"error": "Request timed out"}), 504

        return jsonify(response.to_dict())

    return app


if __name__ == "__main__":
    missing = settings.validate()
    if missing:
        logger.warning(f"Missing settings: {', '.join(missing)}")
    create_app().run(host="0.0.0.0", port=settings.PORT, debug=settings.DEBUG)
