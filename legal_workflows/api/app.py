"""
Flask application factory.

Creates and configures the Flask application with the workflow registry,
error handlers and routes.
"""

import logging
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from legal_workflows.config import get_config
from legal_workflows.domain import NotFoundError, ValidationError
from legal_workflows.services import ActionHandlerRegistry, WorkflowRegistry

logger = logging.getLogger(__name__)


def create_app(
    config=None,
    registry: Optional[WorkflowRegistry] = None,
    handler_registry: Optional[ActionHandlerRegistry] = None,
) -> Flask:
    """
    Application factory for creating Flask app.

    Args:
        config: Optional configuration object
        registry: Optional pre-built workflow registry
        handler_registry: Action handlers used when no registry is given

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    # Enable CORS for all routes
    CORS(app)

    # Load configuration
    app_config = config or get_config()
    app.config["SECRET_KEY"] = app_config.SECRET_KEY
    app.config["DEBUG"] = app_config.FLASK_DEBUG
    app.config["APP_CONFIG"] = app_config

    # One registry per application, shared by all requests
    if registry is None:
        registry = WorkflowRegistry(
            handler_registry=handler_registry,
            action_timeout=app_config.ACTION_TIMEOUT_SECONDS,
        )
        for template_id in app_config.active_template_ids:
            registry.activate_template(template_id)
    app.config["WORKFLOW_REGISTRY"] = registry

    register_error_handlers(app)

    from .routes import register_routes
    register_routes(app)

    @app.route("/health")
    def health_check():
        """Health check endpoint."""
        workflow_registry = app.config["WORKFLOW_REGISTRY"]

        redis_healthy = True
        try:
            from legal_workflows.worker import EventQueue
            redis_healthy = EventQueue().ping()
        except Exception:
            redis_healthy = False

        return jsonify({
            "status": "healthy",
            "workflows": len(workflow_registry),
            "active_workflows": len(workflow_registry.active_instances()),
            "redis": "healthy" if redis_healthy else "unhealthy",
        }), 200

    logger.info("Flask application created")
    return app


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the application."""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        """Handle HTTP exceptions."""
        response = {
            "error": {
                "code": e.code,
                "name": e.name,
                "message": e.description,
            }
        }
        return jsonify(response), e.code

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        """Handle malformed workflow definitions and events."""
        return jsonify({
            "error": {
                "code": 400,
                "name": "Bad Request",
                "message": str(e),
                "problems": e.problems,
            }
        }), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(e: NotFoundError):
        """Handle unknown workflow or template ids."""
        return jsonify({
            "error": {
                "code": 404,
                "name": "Not Found",
                "message": str(e),
            }
        }), 404

    @app.errorhandler(Exception)
    def handle_generic_exception(e: Exception):
        """Handle unexpected errors."""
        logger.exception(f"Unhandled exception: {e}")
        return jsonify({
            "error": {
                "code": 500,
                "name": "Internal Server Error",
                "message": "An unexpected error occurred",
            }
        }), 500
