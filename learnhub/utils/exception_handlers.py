import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from learnhub.schemas.generic import ApiResponse
from learnhub.utils.exceptions import (
    ValidationException,
    ResourceNotFoundException,
    PersistenceException,
    AttemptPersistenceException,
    AccessDeniedException,
    UnauthorizedException,
)

logger = logging.getLogger(__name__)


def _error_response(code: int, message: str, data=None) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content=ApiResponse.error(code=code, message=message, data=data).model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI):
    """
    Register global exception handlers for the FastAPI app.
    Every domain exception is mapped to an ApiResponse error envelope.
    """

    @app.exception_handler(ValidationException)
    async def validation_handler(request: Request, exc: ValidationException):
        logger.warning(f"ValidationException: {exc.message}")
        return _error_response(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(ResourceNotFoundException)
    async def resource_not_found_handler(
            request: Request, exc: ResourceNotFoundException
    ):
        logger.warning(f"ResourceNotFoundException: {exc.message}")
        return _error_response(status.HTTP_404_NOT_FOUND, exc.message)

    @app.exception_handler(AttemptPersistenceException)
    async def attempt_persistence_handler(
            request: Request, exc: AttemptPersistenceException
    ):
        # The learner still gets the locally computed score
        logger.error(f"AttemptPersistenceException: {exc.message}", exc_info=True)
        return _error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            exc.message,
            data=exc.state.model_dump(mode="json"),
        )

    @app.exception_handler(PersistenceException)
    async def persistence_handler(request: Request, exc: PersistenceException):
        logger.error(f"PersistenceException: {exc.message}", exc_info=True)
        return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc.message)

    @app.exception_handler(AccessDeniedException)
    async def access_denied_handler(request: Request, exc: AccessDeniedException):
        logger.error(f"AccessDeniedException: {exc.message}", exc_info=True)
        return _error_response(status.HTTP_403_FORBIDDEN, exc.message)

    @app.exception_handler(UnauthorizedException)
    async def unauthorized_handler(request: Request, exc: UnauthorizedException):
        logger.error(f"UnauthorizedException: {exc.message}", exc_info=True)
        return _error_response(status.HTTP_401_UNAUTHORIZED, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
            request: Request, exc: RequestValidationError
    ):
        logger.error(f"Validation error: {exc.errors()}")
        errors = []
        for error in exc.errors():
            field = (
                ".".join(str(x) for x in error["loc"]) if error["loc"] else "unknown"
            )
            errors.append(f"{field}: {error['msg']}")

        message = ", ".join(errors)
        return _error_response(
            status.HTTP_400_BAD_REQUEST, f"Validation Error: {message}"
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.error(f"HTTPException: {exc.detail}", exc_info=True)
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled Exception: {str(exc)}", exc_info=True)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error"
        )
