# poliux/errors.py
"""Domain errors. Each carries the HTTP status the API answers with."""


class PoliuxError(Exception):
    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.error)
        self.message = message or self.error


class ValidationError(PoliuxError):
    status_code = 400
    error = "Invalid request"


class AuthenticationError(PoliuxError):
    status_code = 401
    error = "Authentication required"


class NotFoundError(PoliuxError):
    status_code = 404
    error = "Not found"


class ConflictError(PoliuxError):
    status_code = 409
    error = "Already exists"


class UpstreamError(PoliuxError):
    status_code = 500
    error = "Upstream service failed"


class ServiceUnavailableError(PoliuxError):
    status_code = 503
    error = "Service not available"
