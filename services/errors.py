from __future__ import annotations


class WorkflowError(Exception):
    """
    Base de los errores del flujo de aprobación.
    `kind` es la categoría que se muestra al usuario.
    """

    kind = "error"
    status_code = 500
    default_message = "Something went wrong, please try again."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(WorkflowError, ValueError):
    kind = "invalid_input"
    status_code = 400
    default_message = "Your input was invalid."


class InvalidCodeError(ValidationError):
    kind = "invalid_code"
    default_message = "The join code is invalid or has expired."


class ConflictError(ValidationError):
    kind = "conflict"
    status_code = 409
    default_message = "The record conflicts with an existing one."


class NotFoundError(WorkflowError, LookupError):
    kind = "not_found"
    status_code = 404
    default_message = "The requested record does not exist."


class TransientServiceError(WorkflowError):
    kind = "unavailable"
    status_code = 503
    default_message = "The service is temporarily unavailable, try again."


class ConsistencyError(WorkflowError):
    kind = "consistency"
    status_code = 500
    default_message = "The operation could not be applied consistently."


PERMISSION_DENIED_MESSAGE = "You are not permitted to perform this action."
