# api/utils/errors.py

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

from services.errors import PERMISSION_DENIED_MESSAGE, WorkflowError


def register_error_handlers(app) -> None:
    """
    Traduce los errores del flujo a respuestas JSON que distinguen
    "dato inválido" / "sin permiso" / "reintentá".
    """

    @app.errorhandler(WorkflowError)
    def handle_workflow_error(exc: WorkflowError):
        if exc.status_code >= 500:
            current_app.logger.error("Workflow failure: %s", exc.message)
        return jsonify({"error": exc.message, "kind": exc.kind}), exc.status_code

    @app.errorhandler(PermissionError)
    def handle_permission_error(exc: PermissionError):
        current_app.logger.info("Permission denied: %s", exc)
        return jsonify({"error": str(exc) or PERMISSION_DENIED_MESSAGE, "kind": "forbidden"}), 403

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"error": exc.description, "kind": exc.name.lower().replace(" ", "_")}), exc.code
