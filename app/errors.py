"""Error taxonomy shared by the services and the HTTP layer.

Services raise these; the blueprints render them as
``{"success": false, "error": {"kind": ..., "message": ...}}`` with the
class's ``status_code``.
"""


class CatalogError(Exception):
    kind = "CatalogError"
    status_code = 500

    def __init__(self, message, **detail):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self):
        error = {"kind": self.kind, "message": self.message}
        if self.detail:
            error["detail"] = self.detail
        return {"success": False, "error": error}


class ValidationError(CatalogError):
    """Malformed or missing input. Raised before any write."""

    kind = "ValidationError"
    status_code = 400


class NotFoundError(CatalogError):
    kind = "NotFoundError"
    status_code = 404


class ConflictError(CatalogError):
    kind = "ConflictError"
    status_code = 409


class TransactionError(CatalogError):
    """An atomic multi-row write failed and was rolled back in full."""

    kind = "TransactionError"
    status_code = 500


class DependencyError(CatalogError):
    """A secondary write or external collaborator failed.

    Swallowed (and logged) for best-effort side writes; only reaches the
    caller when the collaborator was required, e.g. the video upload itself.
    """

    kind = "DependencyError"
    status_code = 502


class Unauthorized(CatalogError):
    kind = "Unauthorized"
    status_code = 401


class Forbidden(CatalogError):
    kind = "Forbidden"
    status_code = 403
