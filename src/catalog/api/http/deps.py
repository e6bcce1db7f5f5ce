"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.catalog.api.http.app_data import ApplicationDependencies
from src.catalog.core.services.listing.listing_service import ListingService
from src.catalog.core.services.products.creation import ProductCreationWorkflow
from src.catalog.core.services.storage.image_store import ImageStore
from src.catalog.entities.catalog.product import ProductRepository


def get_db_session(request: Request) -> Iterator[Session]:
    """Yield a database session for the duration of the request."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_image_store(request: Request) -> ImageStore:
    """Get the image store instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.image_store


def get_product_repository(db: Session = Depends(get_db_session)) -> ProductRepository:
    return ProductRepository(db)


def get_listing_service(
    repository: ProductRepository = Depends(get_product_repository),
) -> ListingService:
    return ListingService(repository)


def get_creation_workflow(
    repository: ProductRepository = Depends(get_product_repository),
    image_store: ImageStore = Depends(get_image_store),
) -> ProductCreationWorkflow:
    return ProductCreationWorkflow(repository, image_store)
