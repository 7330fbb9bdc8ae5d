"""Domain errors raised by the workspace services.

Each error carries the HTTP status class the API layer answers with:
403 for bad sessions and missing privileges, 400 for everything that
does not resolve or does not validate.
"""


class WorkspaceError(Exception):
    status_code: int = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class Unauthenticated(WorkspaceError):
    status_code = 403


class NotFound(WorkspaceError):
    status_code = 400


class InvalidInput(WorkspaceError):
    status_code = 400


class Forbidden(WorkspaceError):
    status_code = 403
