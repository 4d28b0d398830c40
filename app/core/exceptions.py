import enum


class ErrorKind(str, enum.Enum):
    VALIDATION = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_IDENTIFIER = "INVALID_ID"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE = "DUPLICATE_RESOURCE"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INTERNAL = "INTERNAL_SERVER_ERROR"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.INVALID_IDENTIFIER: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DUPLICATE: 409,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.INTERNAL: 500,
}

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


class AppError(Exception):
    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    @property
    def code(self) -> str:
        return self.kind.value

    def to_dict(self) -> dict[str, int | str]:
        return {"status": self.status_code, "code": self.code, "message": self.message}


class InvalidInputError(AppError):
    def __init__(self, message: str = "Invalid request body"):
        super().__init__(ErrorKind.VALIDATION, message)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "unauthorized"):
        super().__init__(ErrorKind.UNAUTHORIZED, message)


class InvalidIdentifierError(AppError):
    def __init__(self, value: str | None = None):
        super().__init__(ErrorKind.INVALID_IDENTIFIER, "Invalid ID format")
        self.value = value


class NotFoundError(AppError):
    """Raised for missing records and for records owned by another user alike."""

    def __init__(self, entity: str = "Resource"):
        super().__init__(ErrorKind.NOT_FOUND, f"{entity} not found")
        self.entity = entity


class DuplicateEmailError(AppError):
    def __init__(self):
        super().__init__(ErrorKind.DUPLICATE, "Email already exists")


class InvalidCredentialsError(AppError):
    def __init__(self):
        super().__init__(ErrorKind.INVALID_CREDENTIALS, "Invalid email or password")


class InternalError(AppError):
    """Client-facing message is always generic; details belong in the logs."""

    def __init__(self, detail: str | None = None):
        super().__init__(ErrorKind.INTERNAL, INTERNAL_ERROR_MESSAGE)
        self.detail = detail


class PersistenceTimeoutError(InternalError):
    def __init__(self, detail: str = "persistence operation exceeded the request deadline"):
        super().__init__(detail)
