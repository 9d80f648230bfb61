"""
Error taxonomy shared by the paste engine and the HTTP layer.

Every error carries the status code it maps to and a short message that is
safe to show to the caller.
"""


class PastebinError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(PastebinError):
    status_code = 400
    message = "Invalid request"


class AuthenticationRequired(PastebinError):
    status_code = 401
    message = "Authentication required"


class AuthorizationDenied(PastebinError):
    status_code = 403
    message = "Not authorized"


class NotFound(PastebinError):
    # absent and expired are reported the same way
    status_code = 404
    message = "Paste not found"


class Conflict(PastebinError):
    status_code = 500
    message = "Could not store paste, please retry"


class InternalFailure(PastebinError):
    status_code = 500
    message = "Internal server error"
