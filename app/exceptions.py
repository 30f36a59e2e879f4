"""
Domain exceptions raised by the service layer.

Each carries a user-facing message and the HTTP status the web layer should
answer with. Handlers in ``app.main`` turn them into JSON for ``/api`` routes
and into the error page everywhere else.
"""


class DomainError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    status_code = 409


class PermissionDenied(DomainError):
    status_code = 403
