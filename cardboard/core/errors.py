class CardboardError(Exception):
    """Base error; ``message`` is shown to the user verbatim."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(CardboardError):
    pass


class NotAuthenticatedError(AuthError):
    status_code = 401


class MutationError(CardboardError):
    pass


class UploadError(CardboardError):
    pass


class NotFoundError(CardboardError):
    status_code = 404


def db_error_message(error: Exception) -> str:
    """The driver's own message when SQLAlchemy wraps one."""
    orig = getattr(error, "orig", None)
    return str(orig) if orig is not None else str(error)
