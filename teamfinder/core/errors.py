"""Error taxonomy for the match completion workflow.

Services raise these instead of ``HTTPException`` so they can be called
outside a request. ``teamfinder.main`` registers a single handler that
renders any ``CompletionError`` as ``{"detail": message}`` with the class's
``status_code``.
"""


class CompletionError(Exception):
    """Base class for workflow errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CompletionError):
    """Malformed or out-of-range input, detected before touching the store."""

    status_code = 400


class RoleNotEligibleError(ValidationError):
    """The creating actor's role is not a required confirmer for the match type."""

    status_code = 403


class AuthorizationError(CompletionError):
    """Caller is not a legitimate confirmer or participant for the record."""

    status_code = 403


class NotFoundError(CompletionError):
    status_code = 404


class ConflictError(CompletionError):
    """The caller's role has already confirmed this record."""

    status_code = 409


class NotReadyError(CompletionError):
    """Annotation attempted before the record was confirmed."""

    status_code = 409
