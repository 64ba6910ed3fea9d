"""Error taxonomy shared by the core modules.

The routers translate these into ``HTTPException`` responses; nothing here
is meant to reach a process-level handler.
"""


class TalksError(Exception):
    """Base class for every error raised by the core."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(TalksError):
    status_code = 404


class ValidationFailure(TalksError):
    status_code = 400


class ProtectedRecord(TalksError):
    """A guarded field was asked to change after its protection kicked in."""

    status_code = 409


class PermissionDenied(TalksError):
    status_code = 403


class CollaboratorError(TalksError):
    """An external service (text generation, media capture) failed."""

    status_code = 502
