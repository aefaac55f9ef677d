"""Error types raised by the auth service and turned into HTTP responses."""


class AuthError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(AuthError):
    status_code = 400


class InvalidCredentials(AuthError):
    status_code = 401


class Unauthorized(AuthError):
    status_code = 401


class Forbidden(AuthError):
    status_code = 403


class NotFound(AuthError):
    status_code = 404


class DuplicateResource(AuthError):
    status_code = 400


class EmailDeliveryError(AuthError):
    status_code = 500
