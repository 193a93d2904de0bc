import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from mangum import Mangum
from starlette.middleware.sessions import SessionMiddleware

from donation_api.api import routers
from donation_api.core.config import Settings, get_settings, log_configuration_warnings
from donation_api.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Builds the application. Passing ``settings`` pins them for every route,
    which is how tests run against an isolated configuration.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
        log_configuration_warnings(settings)
        yield

    app = FastAPI(title="Donation API", lifespan=lifespan)
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET_KEY,
        same_site="lax",
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={"detail": "Invalid request body", "errors": jsonable_encoder(exc.errors())}
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Server Error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})

    app.include_router(routers.health_router)
    app.include_router(routers.donate_router)
    app.include_router(routers.contact_router)
    app.include_router(routers.auth_router)
    app.include_router(routers.upload_router)

    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

    return app


configure_logging(get_settings().LOG_LEVEL)

app = create_app()

handler = Mangum(app)


def run() -> None:
    uvicorn.run(app, host="0.0.0.0", port=get_settings().PORT)


if __name__ == "__main__":
    run()
