"""Global error handling middleware"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import traceback
import logging

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turns unhandled exceptions into JSON 500 responses"""

    def __init__(self, app, expose_errors: bool = False):
        super().__init__(app)
        self.expose_errors = expose_errors

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")
            logger.error(traceback.format_exc())

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal server error",
                    "detail": str(exc) if self.expose_errors else "An unexpected error occurred"
                }
            )
