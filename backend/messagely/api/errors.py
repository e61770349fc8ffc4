from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from messagely.core.errors import ErrorKind, ServiceError

# Every ErrorKind must have an entry - a missing kind is a KeyError at import
ERROR_STATUS = {
    ErrorKind.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.DUPLICATE_USER: status.HTTP_400_BAD_REQUEST,
    ErrorKind.MESSAGE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}
_missing = [kind for kind in ErrorKind if kind not in ERROR_STATUS]
if _missing:
    raise KeyError(f"No HTTP status for error kinds: {_missing}")


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind is ErrorKind.INVALID_TOKEN else None
    return JSONResponse(
        status_code=ERROR_STATUS[exc.kind],
        content={"detail": exc.detail, "kind": exc.kind.value},
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
