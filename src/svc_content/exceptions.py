from __future__ import annotations


class ContentError(Exception):
    """Base error for the content service.

    ``status_code`` is what the request pipeline answers with. Errors marked
    ``fatal`` are programming errors: they are logged and answered with an
    empty 500 like any unexpected exception.
    """

    status_code: int = 500
    fatal: bool = False

    def __init__(self, detail: str = "", **context):
        super().__init__(detail)
        self.detail = detail
        self.context = context


class ValidationError(ContentError):
    status_code = 400


class UnauthorizedError(ContentError):
    status_code = 401


class NotFoundError(ContentError):
    status_code = 404


class ConflictError(ContentError):
    """Raised when a rename or move would land on an existing document."""

    status_code = 409


class OperationNotImplemented(ContentError):
    """A route asked a controller for an operation it does not provide."""

    fatal = True

    def __init__(self, model: str, operation: str):
        super().__init__(f"Controller for '{model}' does not implement '{operation}'.")
        self.model = model
        self.operation = operation


class EmailDeliveryError(ContentError):
    fatal = True


class StoreRequestError(ContentError):
    """The commerce store API answered with a failure after all retries."""

    fatal = True

    def __init__(self, method: str, url: str, status: int, body: str = ""):
        super().__init__(f"Store request failed - {method.upper()} {url} {status} {body}".rstrip())
        self.method = method
        self.url = url
        self.status = status
        self.body = body


__all__ = [
    "ContentError",
    "ValidationError",
    "UnauthorizedError",
    "NotFoundError",
    "ConflictError",
    "OperationNotImplemented",
    "EmailDeliveryError",
    "StoreRequestError",
]
