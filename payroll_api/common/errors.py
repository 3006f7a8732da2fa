# payroll_api/common/errors.py
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException
from payroll_api.common.http import fail


class APIError(Exception):
    """Error carrying its own HTTP status and machine-readable code."""
    status_code = 400
    code = "BAD_REQUEST"

    def __init__(self, message, code=None, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload


class ValidationError(APIError):
    """Missing or malformed request input."""
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(APIError):
    """Employee, user, rate or withdrawal id did not resolve."""
    status_code = 404
    code = "NOT_FOUND"


class StorageError(APIError):
    """Persistence failed; the client only ever sees a generic message."""
    status_code = 500
    code = "STORAGE_ERROR"

    def __init__(self, message="Storage failure", **kw):
        super().__init__(message, **kw)


def register_error_handlers(app):
    @app.errorhandler(StorageError)
    def _storage(e: StorageError):
        app.logger.error("storage error: %s", e.message)
        return fail("Internal server error", status=500, code=e.code)

    @app.errorhandler(APIError)
    def _api(e: APIError):
        return fail(e.message, status=e.status_code, code=e.code, detail=e.payload)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return fail(e.description or e.name, status=e.code or 500)

    @app.errorhandler(IntegrityError)
    def _dup(e: IntegrityError):
        # a lost race against a duplicate check reads the same as the check itself
        app.logger.warning("integrity error: %s", getattr(e, "orig", e))
        return fail("Duplicate or FK constraint failed", status=ValidationError.status_code,
                    code=ValidationError.code)

    @app.errorhandler(Exception)
    def _500(e: Exception):
        app.logger.exception(e)
        return fail("Internal server error", status=500)
