"""
Engine exceptions and their HTTP mapping.

The analytics services never raise for well-typed input: empty lists, zero
windows and unknown frequencies all have defined results. What remains is a
broken tables file (EngineConfigError) and a schedule the scheduler cannot
expand (InvalidScheduleError).

Error bodies look like:
    {"detail": "...", "context": {...}, "request_id": "3f2a9c1e"}
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from health_engine.core.logging_config import get_request_id

logger = logging.getLogger(__name__)


class HealthEngineError(Exception):
    """
    Base class for engine errors.

    Subclasses set ``status_code`` and a default ``detail``; keyword
    arguments passed at raise time become the error's ``context``.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "Health engine error"

    def __init__(self, detail: Optional[str] = None, status_code: Optional[int] = None, **context: Any):
        self.detail = detail or type(self).detail
        self.status_code = status_code or type(self).status_code
        self.context = context
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"detail": self.detail}
        if self.context:
            body["context"] = self.context
        request_id = get_request_id()
        if request_id:
            body["request_id"] = request_id
        return body


class EngineConfigError(HealthEngineError):
    """The engine tables file is missing, unparseable or inconsistent."""

    detail = "Invalid engine configuration"


class InvalidScheduleError(HealthEngineError):
    """A medication schedule holds a time of day that is not HH:MM."""

    status_code = 422
    detail = "Invalid medication schedule"

    def __init__(self, time_of_day: Optional[str] = None, **context: Any):
        detail = f"Invalid time of day '{time_of_day}', expected HH:MM" if time_of_day is not None else None
        super().__init__(detail=detail, time_of_day=time_of_day, **context)


async def health_engine_exception_handler(request: Request, exc: HealthEngineError) -> JSONResponse:
    """Log at ERROR for server faults, WARNING for rejected input."""
    logger.log(
        logging.ERROR if exc.status_code >= 500 else logging.WARNING,
        exc.detail,
        extra={"status_code": exc.status_code, "path": request.url.path, "context": exc.context},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HealthEngineError, health_engine_exception_handler)
