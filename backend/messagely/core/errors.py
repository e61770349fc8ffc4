"""
Error kinds raised by the credential and messaging services.

Every failure carries an ``ErrorKind`` tag on a single ``ServiceError`` type
so the HTTP layer can translate kinds to statuses from one table.
Wrong passwords and wrong reset codes are not errors: those checks return False.
"""

from enum import Enum


class ErrorKind(str, Enum):
    USER_NOT_FOUND = "user_not_found"
    DUPLICATE_USER = "duplicate_user"
    MESSAGE_NOT_FOUND = "message_not_found"
    FORBIDDEN = "forbidden"
    INVALID_TOKEN = "invalid_token"
    STORE_UNAVAILABLE = "store_unavailable"


class ServiceError(Exception):
    """A failure of kind ``kind`` with a human-readable ``detail``"""

    def __init__(self, kind: ErrorKind, detail: str):
        super().__init__(detail)
        self.kind = kind
        self.detail = detail

    def __repr__(self) -> str:
        return f"ServiceError({self.kind.value!r}, {self.detail!r})"


def user_not_found(username: str) -> ServiceError:
    return ServiceError(ErrorKind.USER_NOT_FOUND, f"No user found with username: {username}")


def message_not_found(message_id: int) -> ServiceError:
    return ServiceError(ErrorKind.MESSAGE_NOT_FOUND, f"No message found with id: {message_id}")
