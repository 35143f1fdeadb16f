"""
Application-wide error handlers
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.exceptions import InvalidIdentifierError
from views.templating import templates

logger = logging.getLogger(__name__)


def _wants_json(request: Request) -> bool:
    return request.url.path.startswith("/api")


def register_error_handlers(app):
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            if _wants_json(request):
                return JSONResponse({"error": "Resource not found"}, status_code=404)
            return templates.TemplateResponse(
                request, "not_found.html", {"message": None}, status_code=404
            )
        return JSONResponse(
            {"error": exc.detail}, status_code=exc.status_code, headers=exc.headers
        )

    @app.exception_handler(InvalidIdentifierError)
    async def invalid_identifier_handler(request: Request, exc: InvalidIdentifierError):
        return JSONResponse({"error": "Invalid identifier"}, status_code=400)

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error("Internal server error on %s", request.url.path, exc_info=exc)
        details = None
        if not request.app.state.config.is_production:
            details = f"{type(exc).__name__}: {exc}"

        if _wants_json(request):
            content = {"error": "Internal server error"}
            if details:
                content["details"] = details
            return JSONResponse(content, status_code=500)
        return templates.TemplateResponse(
            request, "error.html", {"details": details}, status_code=500
        )
