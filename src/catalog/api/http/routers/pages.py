"""Server-rendered catalog pages."""

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from src.catalog.api.http.deps import get_listing_service, get_product_repository
from src.catalog.api.http.middleware.authorization import require_authorization
from src.catalog.core.errors import UpstreamStoreError
from src.catalog.core.services.listing.listing_service import (
    ListingFilter,
    ListingResult,
    ListingService,
)
from src.catalog.entities.catalog.product import ProductRepository

TEMPLATES_DIR = Path(__file__).resolve().parents[3] / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["pages"], dependencies=[Depends(require_authorization)])


@router.get("/", response_class=HTMLResponse)
def products_page(
    request: Request,
    page: str | None = None,
    keyword: str | None = None,
    category_name: str | None = None,
    listing: ListingService = Depends(get_listing_service),
) -> Response:
    listing_filter = ListingFilter.from_query(page, keyword, category_name)
    try:
        data = listing.get_list_data(listing_filter)
    except UpstreamStoreError as e:
        failed = ListingResult(keyword=listing_filter.keyword or "", category=listing_filter.category)
        return templates.TemplateResponse(
            request,
            "products/list_no_data.html",
            {"page_name": "products-list", "data": failed, "error": e.detail()},
        )

    if data.redirect_page is not None:
        target = request.url.include_query_params(page=data.redirect_page)
        return RedirectResponse(str(target), status_code=302)

    template = "products/list.html" if data.rows else "products/list_no_data.html"
    return templates.TemplateResponse(
        request,
        template,
        {"page_name": "products-list", "data": data},
    )


@router.get("/add", response_class=HTMLResponse)
def add_product_page(
    request: Request,
    repository: ProductRepository = Depends(get_product_repository),
) -> Response:
    return templates.TemplateResponse(
        request,
        "products/add.html",
        {"page_name": "products-add", "categories": repository.get_category_names()},
    )
