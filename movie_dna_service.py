#!/usr/bin/env python3
"""
Movie DNA API v1.0.0

HTTP front end for the Movie DNA pipeline.

Endpoints:
    /api/movie-dna (POST)
        - Body: {"movieTitle": "Inception"}
        - 200 with the DnaReport JSON
        - 400 when movieTitle is missing, blank or not a string
        - 404 when the title matches no movie
        - 502 when TMDB fails (or rejects the API key)
        - 500 when API keys are not configured, or on unexpected errors

    /api/health (GET)     shallow health check
    /health/ready (GET)   readiness: provider credentials configured
    /health/live (GET)    liveness
    /metrics (GET)        in-process counters and timings

Environment Variables:
    See config.py. TMDB_API_KEY and GROQ_API_KEY are required for analysis.
"""

import logging
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import AppConfig
from constants import SERVICE_NAME, SERVICE_TITLE, SERVICE_VERSION
from errors import NotFoundError, ProviderError, ValidationError
from logging_config import configure_logging, setup_flask_request_id
from metrics import metrics
from movie_dna import MovieDNAPipeline
from text_utils import validate_movie_title

logger = logging.getLogger(__name__)


# =============================================================================
# Error Responses
# =============================================================================

def _error_response(status: int, error: str, details: Optional[str] = None, **extra):
    payload = {"error": error}
    if details:
        payload["details"] = details
    payload.update(extra)
    return jsonify(payload), status


def register_error_handlers(app: Flask) -> None:
    """Map pipeline exceptions to HTTP responses."""

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        metrics.inc("dna_requests", labels={"outcome": "invalid"})
        return _error_response(400, str(e))

    @app.errorhandler(NotFoundError)
    def handle_not_found(e: NotFoundError):
        metrics.inc("dna_requests", labels={"outcome": "not_found"})
        logger.info(f"Not found: {e.title}", extra={'movie_title': e.title})
        return _error_response(404, str(e), title=e.title)

    @app.errorhandler(ProviderError)
    def handle_provider_error(e: ProviderError):
        metrics.inc("dna_requests", labels={"outcome": "provider_error"})
        logger.error(
            f"Provider failure ({e.provider}, status={e.status}): {e} {e.body}",
            extra={'provider': e.provider, 'status_code': e.status},
        )
        return _error_response(
            502,
            "Failed to analyze movie DNA",
            str(e),
            provider=e.provider,
            providerStatus=e.status,
        )

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        # Routing errors (404/405) keep their own responses
        if isinstance(e, HTTPException):
            return e
        metrics.inc("dna_requests", labels={"outcome": "error"})
        logger.exception(f"Unexpected error: {e}")
        return _error_response(500, "Failed to analyze movie DNA", str(e))


# =============================================================================
# App Factory
# =============================================================================

def create_app(
    config: Optional[AppConfig] = None,
    pipeline: Optional[MovieDNAPipeline] = None,
) -> Flask:
    """
    Build the Flask application.

    Args:
        config: Service configuration (defaults to AppConfig.from_env())
        pipeline: Pre-built pipeline; built from config when omitted and
            both API keys are present

    Returns:
        Configured Flask app
    """
    config = config or AppConfig.from_env()
    if pipeline is None and config.credentials.complete:
        pipeline = MovieDNAPipeline.from_config(config)

    app = Flask(__name__)
    app.json.sort_keys = False
    app.extensions[SERVICE_NAME] = {"config": config, "pipeline": pipeline}

    CORS(app)
    setup_flask_request_id(app)
    register_error_handlers(app)

    @app.route('/api/movie-dna', methods=['POST'])
    def movie_dna():
        """Analyze a movie's creative DNA."""
        if pipeline is None:
            metrics.inc("dna_requests", labels={"outcome": "unconfigured"})
            logger.error(f"Missing API keys: {', '.join(config.credentials.missing)}")
            return _error_response(500, "Missing API keys")

        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Movie title is required")
        title = validate_movie_title(data.get("movieTitle"))

        logger.info(f"Analyzing DNA for: {title}", extra={'movie_title': title})
        report = pipeline.analyze(title)

        metrics.inc("dna_requests", labels={"outcome": "ok"})
        return jsonify(report.to_dict())

    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Shallow health check - confirms app is running."""
        return jsonify({
            "status": "ok",
            "message": f"{SERVICE_TITLE} is running",
            "version": SERVICE_VERSION,
        })

    @app.route('/health/ready', methods=['GET'])
    def readiness_check():
        """
        Readiness probe.

        Ready when both provider keys are configured. No provider is
        called; keys are reported by 4-character prefix only.
        """
        creds = config.credentials
        ready = creds.complete
        return jsonify({
            "status": "ready" if ready else "unready",
            "version": SERVICE_VERSION,
            "checks": {
                "credentials": creds.describe(),
                "credentials_source": creds.source,
                "models": {
                    "analysis": config.analysis_model,
                    "insight": config.insight_model,
                },
            },
            "metrics": metrics.get_stats(),
        }), 200 if ready else 503

    @app.route('/health/live', methods=['GET'])
    def liveness_check():
        """Liveness probe."""
        return jsonify({"status": "alive"}), 200

    @app.route('/metrics', methods=['GET'])
    def metrics_endpoint():
        """Return application metrics."""
        return jsonify(metrics.get_stats())

    return app


# =============================================================================
# Main
# =============================================================================

def main() -> None:
    config = AppConfig.from_env()
    configure_logging(level=config.log_level, structured=config.structured_logging)

    app = create_app(config)

    logger.info(f"Starting {SERVICE_TITLE} v{SERVICE_VERSION} on port {config.port}")
    logger.info(f"TMDB API Key: {'Configured' if config.credentials.tmdb_api_key else 'Missing'}")
    logger.info(f"Groq API Key: {'Configured' if config.credentials.groq_api_key else 'Missing'}")
    logger.info(f"Models: analysis={config.analysis_model}, insight={config.insight_model}")
    app.run(host="0.0.0.0", port=config.port, debug=False)


if __name__ == "__main__":
    main()
