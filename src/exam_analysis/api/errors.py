import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from exam_analysis.api.schemas import ErrorDetail
from exam_analysis.core.exceptions import (
    ExamAnalysisError,
    InsufficientDataError,
    InvalidInputError,
    InvalidQuestionError,
)

logger = logging.getLogger(__name__)


class DataSizeExceededError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def _get_request_id(request: Request) -> str | None:
    if hasattr(request.state, "request_id"):
        result: str = request.state.request_id
        return result
    return None


def _error_response(
    request: Request, code: str, message: str, status_code: int = 422
) -> JSONResponse:
    detail = ErrorDetail(
        code=code,
        message=message,
        request_id=_get_request_id(request),
    )
    return JSONResponse(status_code=status_code, content=detail.model_dump())


async def data_size_exceeded_handler(
    request: Request, exc: DataSizeExceededError
) -> JSONResponse:
    return _error_response(request, "DATA_SIZE_EXCEEDED", exc.message)


async def invalid_input_handler(
    request: Request, exc: InvalidInputError
) -> JSONResponse:
    return _error_response(request, "INVALID_INPUT", exc.message)


async def invalid_question_handler(
    request: Request, exc: InvalidQuestionError
) -> JSONResponse:
    return _error_response(request, "INVALID_QUESTION", exc.message)


async def insufficient_data_handler(
    request: Request, exc: InsufficientDataError
) -> JSONResponse:
    return _error_response(request, "INSUFFICIENT_DATA", exc.message)


async def domain_error_handler(
    request: Request, exc: ExamAnalysisError
) -> JSONResponse:
    return _error_response(request, "INVALID_INPUT", exc.message)


async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    return _error_response(request, "VALIDATION_ERROR", str(exc))


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    logger.exception("Unhandled exception")
    return _error_response(
        request, "INTERNAL_ERROR", "Internal server error", status_code=500
    )
