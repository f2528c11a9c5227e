import uuid
from collections.abc import Awaitable, Callable
from typing import cast

from fastapi import FastAPI, Request, Response
from pydantic import ValidationError
from starlette.types import ExceptionHandler

from exam_analysis.api.config import ApiSettings
from exam_analysis.api.dependencies import get_settings
from exam_analysis.api.errors import (
    DataSizeExceededError,
    data_size_exceeded_handler,
    domain_error_handler,
    insufficient_data_handler,
    invalid_input_handler,
    invalid_question_handler,
    unhandled_exception_handler,
    validation_error_handler,
)
from exam_analysis.api.routes import router
from exam_analysis.core.exceptions import (
    ExamAnalysisError,
    InsufficientDataError,
    InvalidInputError,
    InvalidQuestionError,
)


def create_app(settings: ApiSettings | None = None) -> FastAPI:
    if settings is None:
        settings = get_settings()

    app = FastAPI(title="Exam Analysis API")
    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    # FastAPI types handlers as (Request, Exception); ours take narrower types.
    _eh = cast(ExceptionHandler, data_size_exceeded_handler)
    app.add_exception_handler(DataSizeExceededError, _eh)
    _eh = cast(ExceptionHandler, invalid_input_handler)
    app.add_exception_handler(InvalidInputError, _eh)
    _eh = cast(ExceptionHandler, invalid_question_handler)
    app.add_exception_handler(InvalidQuestionError, _eh)
    _eh = cast(ExceptionHandler, insufficient_data_handler)
    app.add_exception_handler(InsufficientDataError, _eh)
    _eh = cast(ExceptionHandler, domain_error_handler)
    app.add_exception_handler(ExamAnalysisError, _eh)
    _eh = cast(ExceptionHandler, validation_error_handler)
    app.add_exception_handler(ValidationError, _eh)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Request-ID middleware
    @app.middleware("http")
    async def request_id_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID", uuid.uuid4().hex[:12])
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    app.include_router(router)

    return app
