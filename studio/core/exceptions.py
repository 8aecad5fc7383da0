from fastapi import Request
from fastapi.responses import JSONResponse


class StudioError(Exception):
    """Base exception for Studio API errors."""

    def __init__(
        self,
        code: str,
        message: str,
        status: int = 500,
        details: dict | None = None,
    ):
        self.code = code
        self.message = message
        self.status = status
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        result = {
            "error": {
                "code": self.code,
                "message": self.message,
                "status": self.status,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


class NotFoundError(StudioError):
    def __init__(self, message: str = "Resource not found.", details: dict | None = None):
        super().__init__(code="not_found", message=message, status=404, details=details)


class RuntimeUnavailableError(StudioError):
    def __init__(self, message: str = "The local model runtime is unavailable.", details: dict | None = None):
        super().__init__(
            code="runtime_unavailable",
            message=message,
            status=503,
            details=details or {"suggestion": "Ollama may still be starting up. Try again shortly."},
        )


class PullInProgressError(StudioError):
    def __init__(self, model_id: str, operation_id: str | None = None):
        details = {"model_id": model_id}
        if operation_id:
            details["operation_id"] = operation_id
        super().__init__(
            code="pull_in_progress",
            message=f"A download of '{model_id}' is already in progress.",
            status=409,
            details=details,
        )


class PullStreamTakenError(StudioError):
    def __init__(self, operation_id: str):
        super().__init__(
            code="pull_stream_taken",
            message="This download is already being followed by another client.",
            status=409,
            details={"operation_id": operation_id},
        )


async def studio_error_handler(request: Request, exc: StudioError) -> JSONResponse:
    """Global exception handler for StudioError and subclasses."""
    return JSONResponse(status_code=exc.status, content=exc.to_dict())
