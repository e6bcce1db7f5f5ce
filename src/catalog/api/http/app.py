"""FastAPI application for the product catalog."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger
from starlette.responses import JSONResponse

from src.catalog.api.http.app_data import ApplicationDependencies
from src.catalog.api.http.middleware.authorization import AllowAllPolicy
from src.catalog.api.http.middleware.request_logging import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from src.catalog.api.http.routers import pages, products
from src.catalog.api.utils.app_startup import configure_logging
from src.catalog.core.services.database.db_manage import DbManageService
from src.catalog.core.services.database.db_session import DbSessionService
from src.catalog.core.services.storage.image_store import ImageStore
from src.catalog.runtime.config.config_data import ConfigData
from src.catalog.runtime.context import get_config

__all__ = ["app", "startup", "shutdown"]

configure_logging()


def _check_cors(config: ConfigData) -> None:
    cors = config.app.cors
    if config.app.environment == "production" and "*" in cors.origins and cors.allow_credentials:
        raise RuntimeError("Wildcard CORS origins cannot be combined with credentials in production")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


_config = get_config()
_check_cors(_config)
_expose_docs = _config.app.environment != "production"

app = FastAPI(
    title="Product Catalog",
    lifespan=lifespan,
    docs_url="/docs" if _expose_docs else None,
    redoc_url="/redoc" if _expose_docs else None,
)

# Added last runs first: request logging wraps everything else.
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_config.app.cors.origins,
    allow_credentials=_config.app.cors.allow_credentials,
    allow_methods=_config.app.cors.allow_methods,
    allow_headers=_config.app.cors.allow_headers,
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(products.router)
app.include_router(pages.router)
app.mount(
    "/img",
    StaticFiles(directory=_config.storage.base_dir, check_dir=False),
    name="img",
)


async def startup() -> None:
    config = get_config()
    logger.info("Starting product catalog in {} environment", config.app.environment)

    database_service = DbSessionService()
    if config.database.create_tables:
        DbManageService(database_service.engine).create_all()

    app.state.app_dependencies = ApplicationDependencies(
        database_service=database_service,
        image_store=ImageStore(
            config.storage.base_dir,
            max_upload_bytes=config.storage.max_upload_bytes,
        ),
        authorization_policy=AllowAllPolicy(),
    )


async def shutdown() -> None:
    logger.info("Shutting down product catalog")
    app_dependencies: ApplicationDependencies | None = getattr(
        app.state, "app_dependencies", None
    )
    if app_dependencies is not None:
        app_dependencies.database_service.dispose()


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "healthy"}


@app.get("/ready")
def readiness(request: Request):
    """Readiness probe: the catalog store must answer a trivial query."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    if app_deps.database_service.health_check():
        return {"status": "ready"}
    return JSONResponse(status_code=503, content={"status": "unavailable"})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=_config.app.host,
        port=_config.app.port,
        access_log=False,  # RequestLoggingMiddleware logs every request
    )
