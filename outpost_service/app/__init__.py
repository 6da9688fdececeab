"""FastAPI application wiring."""

from outpost_service.app.exception_handlers import (
    app_exception_handler,
    register_exception_handlers,
)

__all__ = ["app_exception_handler", "register_exception_handlers"]
