"""Request identity, JSON envelopes and error rendering for the blueprints."""
import hmac
import logging
from flask import current_app, request
from werkzeug.exceptions import HTTPException

from app.errors import CatalogError, Forbidden, Unauthorized, ValidationError

logger = logging.getLogger(__name__)

# Set by the authenticating gateway in front of this service
ACTOR_HEADER = "X-User-Id"
ADMIN_ID_HEADER = "X-Admin-Id"
ADMIN_TOKEN_HEADER = "X-Admin-Token"


def current_actor():
    """Caller identity, or None for anonymous requests."""
    value = request.headers.get(ACTOR_HEADER, "").strip()
    return value or None


def require_actor():
    actor = current_actor()
    if actor is None:
        raise Unauthorized("Authentication required")
    return actor


def current_admin():
    return request.headers.get(ADMIN_ID_HEADER, "").strip() or None


def check_admin_token():
    """Token in header must match ADMIN_API_TOKEN when one is configured."""
    expected = current_app.config["ADMIN_API_TOKEN"]
    supplied = request.headers.get(ADMIN_TOKEN_HEADER, "")
    if expected and not hmac.compare_digest(supplied, expected):
        logger.warning("Rejected admin request to %s", request.path)
        raise Forbidden("Admin token required")


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def ok(data=None, status=200, message=None):
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body, status


def register_error_handlers(app):
    @app.errorhandler(CatalogError)
    def handle_catalog_error(error):
        if error.status_code >= 500:
            logger.error("%s on %s: %s", error.kind, request.path, error.message)
        return error.to_dict(), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return {
            "success": False,
            "error": {"kind": "HTTPError", "message": error.description},
        }, error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        logger.exception("Unhandled error on %s", request.path)
        return {
            "success": False,
            "error": {"kind": "InternalError", "message": "Internal server error"},
        }, 500
