"""
errors.py - failures the stores and services raise.
Every error carries a user-facing message and the HTTP status main.py maps it to.
Messages never include SQL or file-system detail; the original exception is logged instead.
"""


class CheckmateError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(CheckmateError):
    status_code = 400
    default_message = "Invalid input"


class InvalidCredential(CheckmateError):
    status_code = 401
    default_message = "Invalid password"


class NotFound(CheckmateError):
    status_code = 404
    default_message = "Not found"


class Conflict(CheckmateError):
    status_code = 409
    default_message = "Already checked in for this activity today"


class AlreadyExists(CheckmateError):
    status_code = 409
    default_message = "Username already exists"


class TransactionFailure(CheckmateError):
    status_code = 500
    default_message = "The operation failed and no changes were made"


class TransientStoreError(CheckmateError):
    status_code = 503
    default_message = "Storage is temporarily unavailable, please try again"
