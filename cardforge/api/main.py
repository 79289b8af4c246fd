from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from cardforge.core.config import settings
from cardforge.core.container import cleanup_dependencies, init_dependencies
from cardforge.core.error_handling import http_exception_handler, validation_exception_handler
from cardforge.core.logging import setup_logging

from .middleware.rate_limiting import RateLimitMiddleware
from .routes import flashcard_routes, generation_routes, health_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await init_dependencies()
    yield
    # Shutdown
    await cleanup_dependencies()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    setup_logging(settings.log_level)

    app = FastAPI(
        title="cardforge",
        description="AI-assisted flashcard generation and flashcard collection API",
        version="1.0.0",
        lifespan=lifespan,
    )
    # Add middleware
    app.add_middleware(RateLimitMiddleware, calls=settings.rate_limit_calls, period=settings.rate_limit_period)
    app.add_middleware(SessionMiddleware, secret_key=settings.secret_key)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Include routers
    app.include_router(generation_routes.router)
    app.include_router(flashcard_routes.router)
    app.include_router(health_routes.router)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("cardforge.api.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
