"""Product catalog JSON API.

Domain failures keep the HTTP status at 200 and report ``success: false``
in the body.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request
from loguru import logger
from starlette.datastructures import UploadFile

from src.catalog.api.http.deps import (
    get_creation_workflow,
    get_listing_service,
    get_product_repository,
)
from src.catalog.api.http.middleware.authorization import require_authorization
from src.catalog.core.errors import UpstreamStoreError
from src.catalog.core.services.listing.listing_service import (
    ListingFilter,
    ListingResult,
    ListingService,
)
from src.catalog.core.services.products.creation import ProductCreationWorkflow
from src.catalog.core.services.storage.image_store import UploadFolder
from src.catalog.entities.catalog.product import ProductRepository

UPLOAD_FIELD = "avatar"

router = APIRouter(tags=["products"], dependencies=[Depends(require_authorization)])


@router.get("/api")
def list_products(
    page: str | None = None,
    keyword: str | None = None,
    category_name: str | None = None,
    listing: ListingService = Depends(get_listing_service),
) -> dict[str, Any]:
    """List products, filtered and paginated."""
    listing_filter = ListingFilter.from_query(page, keyword, category_name)
    try:
        return listing.get_list_data(listing_filter).to_response()
    except UpstreamStoreError as e:
        failed = ListingResult(keyword=listing_filter.keyword or "", category=listing_filter.category)
        return {**failed.to_response(), "error": e.detail().model_dump(mode="json")}


@router.get("/api/{product_id}")
def get_product(
    product_id: str,
    repository: ProductRepository = Depends(get_product_repository),
) -> dict[str, Any]:
    """Get one product with its variants."""
    output: dict[str, Any] = {"success": False, "data": None}
    try:
        parsed_id = int(product_id)
    except ValueError:
        return output

    try:
        product = repository.fetch_by_id(parsed_id)
    except UpstreamStoreError as e:
        output["error"] = e.detail().model_dump(mode="json")
        return output

    if product is not None:
        output["success"] = True
        output["data"] = product.model_dump(mode="json")
    logger.bind(product_id=parsed_id, found=output["success"]).debug("product.fetched")
    return output


@router.post("/api")
async def create_product(
    request: Request,
    workflow: ProductCreationWorkflow = Depends(get_creation_workflow),
) -> dict[str, Any]:
    """Create a product from a multipart form with an optional ``avatar`` image."""
    async with request.form() as form:
        upload = form.get(UPLOAD_FIELD)
        if not isinstance(upload, UploadFile):
            upload = None
        folder = form.get("folder")
        outcome = await workflow.run(
            form,
            upload,
            UploadFolder.parse(folder if isinstance(folder, str) else None),
        )
    return outcome.to_response()
