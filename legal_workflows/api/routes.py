"""
API routes for the workflow automation engine.

Defines REST endpoints for the template catalog, activated workflows and
domain event intake.
"""

import asyncio
import logging

from flask import Flask, Blueprint, current_app, request, jsonify, g

from legal_workflows.domain import (
    DomainEvent,
    NotFoundError,
    ValidationError,
    WorkflowDefinition,
)
from legal_workflows.services import WorkflowRegistry
from legal_workflows.worker import EventQueue

logger = logging.getLogger(__name__)

# Create blueprints
templates_bp = Blueprint("templates", __name__, url_prefix="/api/v1/templates")
workflows_bp = Blueprint("workflows", __name__, url_prefix="/api/v1/workflows")
events_bp = Blueprint("events", __name__, url_prefix="/api/v1/events")


def get_registry() -> WorkflowRegistry:
    """Get the application's workflow registry."""
    return current_app.config["WORKFLOW_REGISTRY"]


def get_queue() -> EventQueue:
    """Get or create EventQueue."""
    if "event_queue" not in g:
        g.event_queue = EventQueue()
    return g.event_queue


# ============================================
# TEMPLATE ENDPOINTS
# ============================================

@templates_bp.route("", methods=["GET"])
def list_templates():
    """
    List the predefined workflow templates.

    Response: 200 OK
    """
    templates = get_registry().catalog.list_templates()
    return jsonify({
        "templates": [t.to_dict() for t in templates],
        "count": len(templates),
    }), 200


@templates_bp.route("/metadata", methods=["GET"])
def get_template_metadata():
    """
    Describe available trigger types, action types and operators.

    Response: 200 OK
    """
    return jsonify(get_registry().catalog.metadata()), 200


@templates_bp.route("/<template_id>", methods=["GET"])
def get_template(template_id: str):
    """
    Get a template by id.

    Response: 200 OK
    """
    try:
        template = get_registry().catalog.get_template(template_id)
        return jsonify(template.to_dict()), 200

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


# ============================================
# WORKFLOW ENDPOINTS
# ============================================

@workflows_bp.route("", methods=["POST"])
def activate_workflow():
    """
    Activate a workflow.

    Request body, either:
    {"template_id": "prazo-7dias-alerta"}
    or:
    {"definition": {"id": ..., "name": ..., "trigger": {...}, "actions": [...]}}

    Response: 201 Created
    """
    data = request.get_json(silent=True)

    if not data:
        return jsonify({"error": "Request body required"}), 400

    registry = get_registry()
    try:
        if data.get("template_id"):
            instance = registry.activate_template(data["template_id"])
        elif data.get("definition"):
            definition = WorkflowDefinition.from_dict(data["definition"])
            instance = registry.activate(definition)
        else:
            return jsonify({"error": "template_id or definition is required"}), 400

        return jsonify(instance_to_dict(instance)), 201

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e), "problems": e.problems}), 400


@workflows_bp.route("", methods=["GET"])
def list_workflows():
    """
    List activated workflows.

    Query params:
    - active: "true" to list only active workflows

    Response: 200 OK
    """
    registry = get_registry()
    if request.args.get("active", "").lower() == "true":
        instances = registry.active_instances()
    else:
        instances = registry.list_instances()

    return jsonify({
        "workflows": [instance_to_dict(i) for i in instances],
        "count": len(instances),
    }), 200


@workflows_bp.route("/<workflow_id>", methods=["GET"])
def get_workflow(workflow_id: str):
    """
    Get an activated workflow by id.

    Response: 200 OK
    """
    try:
        instance = get_registry().get(workflow_id)
        return jsonify(instance_to_dict(instance)), 200

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@workflows_bp.route("/<workflow_id>/toggle", methods=["POST"])
def toggle_workflow(workflow_id: str):
    """
    Flip a workflow between active and inactive.

    Response: 200 OK
    """
    try:
        instance = get_registry().toggle(workflow_id)
        return jsonify(instance_to_dict(instance)), 200

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@workflows_bp.route("/<workflow_id>", methods=["DELETE"])
def remove_workflow(workflow_id: str):
    """
    Remove a workflow permanently.

    Response: 204 No Content
    """
    try:
        get_registry().remove(workflow_id)
        return "", 204

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


# ============================================
# EVENT ENDPOINTS
# ============================================

@events_bp.route("", methods=["POST"])
def handle_event():
    """
    Run a domain event through every active workflow.

    Request body:
    {
        "type": "prazo_proximo",
        "entity": {"numero_processo": "0001234-56.2024.8.26.0100"},
        "context": {"dias_restantes": 3}
    }

    Response: 200 OK with one result per active workflow
    """
    data = request.get_json(silent=True)

    if not data:
        return jsonify({"error": "Request body required"}), 400

    try:
        event = DomainEvent.from_dict(data)
    except ValidationError as e:
        return jsonify({"error": str(e), "problems": e.problems}), 400

    results = asyncio.run(get_registry().handle(event))

    return jsonify({
        "event_id": event.id,
        "results": [execution_result_to_dict(r) for r in results],
        "count": len(results),
        "matched": sum(1 for r in results if r.matched),
    }), 200


@events_bp.route("/queue", methods=["POST"])
def enqueue_event():
    """
    Queue a domain event for the background worker.

    Request body: same as POST /api/v1/events, plus optional
    "delay_seconds".

    Response: 202 Accepted (new) or 200 OK (duplicate event id)
    """
    data = request.get_json(silent=True)

    if not data:
        return jsonify({"error": "Request body required"}), 400

    try:
        event = DomainEvent.from_dict(data)
    except ValidationError as e:
        return jsonify({"error": str(e), "problems": e.problems}), 400

    delay_seconds = data.get("delay_seconds", 0)
    if isinstance(delay_seconds, bool) or not isinstance(delay_seconds, int) or delay_seconds < 0:
        return jsonify({"error": "delay_seconds must be a non-negative integer"}), 400

    message = get_queue().publish(event, delay_seconds=delay_seconds)
    if message is None:
        return jsonify({"event_id": event.id, "status": "duplicate"}), 200

    return jsonify({
        "event_id": event.id,
        "message_id": message.id,
        "status": "queued",
    }), 202


# ============================================
# SERIALIZATION HELPERS
# ============================================

def instance_to_dict(instance) -> dict:
    """Convert WorkflowInstance to API response dict."""
    return {
        "id": instance.id,
        "template_id": instance.template_id,
        "name": instance.definition.name,
        "description": instance.definition.description,
        "trigger": instance.trigger.to_dict(),
        "actions": [a.to_dict() for a in instance.actions],
        "status": instance.status.value,
        "active": instance.active,
        "execution_count": instance.execution_count,
        "created_at": instance.created_at.isoformat(),
        "last_executed_at": instance.last_executed_at.isoformat() if instance.last_executed_at else None,
    }


def action_result_to_dict(result) -> dict:
    """Convert ActionResult to API response dict."""
    return {
        "action_type": result.action_type,
        "success": result.success,
        "error": result.error.value if result.error else None,
        "message": result.message,
        "timed_out": result.timed_out,
    }


def execution_result_to_dict(result) -> dict:
    """Convert ExecutionResult to API response dict."""
    return {
        "workflow_id": result.workflow_id,
        "matched": result.matched,
        "success": result.success,
        "results": [action_result_to_dict(r) for r in result.results],
        "error": result.error.value if result.error else None,
        "error_detail": result.error_detail,
        "failed_condition": result.failed_condition.to_dict() if result.failed_condition else None,
        "executed_at": result.executed_at.isoformat(),
    }


# ============================================
# ROUTE REGISTRATION
# ============================================

def register_routes(app: Flask) -> None:
    """Register all blueprints with the Flask app."""
    app.register_blueprint(templates_bp)
    app.register_blueprint(workflows_bp)
    app.register_blueprint(events_bp)
    logger.info("Routes registered")
