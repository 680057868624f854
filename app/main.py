import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.bootstrap import run_bootstrap
from app.config import settings
from app.database import close_db
from app.dependencies import ServiceContainer
from app.errors import AppError
from app.routers import admin, booking, google_auth

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await run_bootstrap(app.state.container)
    yield
    # Shutdown
    await close_db()


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "; ".join(parts) or "Invalid request"


def create_app(container: Optional[ServiceContainer] = None, run_startup: bool = True) -> FastAPI:
    app = FastAPI(
        title="Meeting Booking API",
        description="Public meeting booking with Google Calendar/Meet and an admin console",
        version="1.0.0",
        lifespan=lifespan if run_startup else None
    )
    app.state.container = container or ServiceContainer.from_config(settings)

    # CORS middleware
    origins = [origin.strip() for origin in settings.ALLOWED_ORIGINS if origin.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(booking.router)
    app.include_router(google_auth.router)
    app.include_router(admin.router)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "Backend running",
            "version": "1.0.0",
            "docs": "/docs"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "message": "API is running"}

    # Global exception handlers
    @app.exception_handler(AppError)
    async def app_error_handler(request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message}
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"detail": _validation_message(exc)}
        )

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
