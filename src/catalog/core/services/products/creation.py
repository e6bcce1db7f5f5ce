"""Create a product from a form submission and an optional image upload.

The image write and the database insert are two independent resources with
no transaction spanning them. Any failure after the image was written is
compensated by deleting it; a crash between the two steps can still leave
an orphaned file behind.

States::

    VALIDATING -> REJECTED | PERSISTING
    PERSISTING -> COMPENSATED | COMPLETED
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from loguru import logger
from pydantic import BaseModel, Field, ValidationError
from starlette.concurrency import run_in_threadpool

from src.catalog.core.errors import ErrorDetail, UpstreamStoreError
from src.catalog.core.services.storage.image_store import (
    ImageRejection,
    ImageStore,
    RejectionReason,
    Upload,
    UploadedImage,
    UploadFolder,
)
from src.catalog.entities.catalog.category import Category
from src.catalog.entities.catalog.product.entity import InsertResult
from src.catalog.entities.catalog.product.repository import ProductRepository

if TYPE_CHECKING:
    from loguru import Logger

FORM_FIELDS = (
    "product_code",
    "name",
    "description",
    "category_name",
    "weight",
    "base_price",
    "price",
    "img_url",
)

REQUIRED_MESSAGE = "This field is required"
PRODUCT_CODE_MESSAGE = "Invalid format (must be P followed by three digits)"
UNKNOWN_CATEGORY_MESSAGE = "Unknown category"


class CreationState(str, Enum):
    VALIDATING = "validating"
    REJECTED = "rejected"
    PERSISTING = "persisting"
    COMPENSATED = "compensated"
    COMPLETED = "completed"


class ProductCreateForm(BaseModel):
    """Validated product form fields."""

    product_code: str = Field(min_length=1, pattern=r"^P\d{3}$")
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: str = Field(min_length=1)
    category_name: str = Field(min_length=1)
    weight: str | None = None
    base_price: str | None = None
    img_url: str | None = None


class FieldError(BaseModel):
    field: str
    message: str


def _error_message(error: Mapping[str, Any]) -> str:
    if error["type"] == "string_pattern_mismatch":
        return PRODUCT_CODE_MESSAGE
    if error["type"] in ("missing", "string_too_short"):
        return REQUIRED_MESSAGE
    return error["msg"]


def validation_errors(exc: ValidationError) -> list[FieldError]:
    return [
        FieldError(
            field=".".join(str(part) for part in error["loc"]),
            message=_error_message(error),
        )
        for error in exc.errors()
    ]


def normalize_weight(weight: str | None) -> str | None:
    """Blank or whitespace-only weights are stored as absent."""
    if weight is None or weight.strip() == "":
        return None
    return weight


def build_insert_payload(
    form: ProductCreateForm, category: Category, image: UploadedImage | None
) -> dict[str, Any]:
    """Map validated form fields onto product columns."""
    image_url = image.filename if image is not None else (form.img_url or None)
    return {
        "product_code": form.product_code,
        "name": form.name,
        "description": form.description,
        "category_id": category.id,
        "weight": normalize_weight(form.weight),
        "price": form.price,
        "image_url": image_url,
    }


@dataclass
class CreationOutcome:
    """Final state of one creation attempt and the data the response needs."""

    state: CreationState
    body_data: dict[str, Any]
    errors: list[FieldError] = field(default_factory=list)
    result: InsertResult | None = None
    error: ErrorDetail | None = None
    image: UploadedImage | None = None
    image_rejection: ImageRejection | None = None

    @property
    def success(self) -> bool:
        return self.state is CreationState.COMPLETED

    def to_response(self) -> dict[str, Any]:
        response: dict[str, Any] = {"success": self.success, "bodyData": self.body_data}
        if self.state is CreationState.REJECTED:
            response["errors"] = [e.model_dump() for e in self.errors]
            return response

        response["result"] = (
            self.result.model_dump(by_alias=True) if self.result is not None else None
        )
        if self.error is not None:
            response["ex"] = self.error.model_dump(mode="json")
        if self.image_rejection is not None:
            response["imageRejection"] = self.image_rejection.reason.value
        return response


def form_body(form: Mapping[str, Any]) -> dict[str, Any]:
    """Pick the known text fields out of a submitted form."""
    return {key: form.get(key) for key in FORM_FIELDS if isinstance(form.get(key), str)}


def with_price_fallback(body: Mapping[str, Any]) -> dict[str, Any]:
    """Use base_price when the form carries no price field at all."""
    candidate = dict(body)
    if "price" not in candidate and candidate.get("base_price") is not None:
        candidate["price"] = candidate["base_price"]
    return candidate


class ProductCreationWorkflow:
    """Validate, upload, insert and compensate."""

    def __init__(self, repository: ProductRepository, image_store: ImageStore) -> None:
        self._repository = repository
        self._image_store = image_store

    async def run(
        self,
        form: Mapping[str, Any],
        upload: Upload | None = None,
        folder: UploadFolder = UploadFolder.BASE,
    ) -> CreationOutcome:
        body = form_body(form)
        bound = logger.bind(product_code=body.get("product_code"))

        stored = await self._image_store.save(upload, folder)
        image = stored if isinstance(stored, UploadedImage) else None
        rejection = (
            stored
            if isinstance(stored, ImageRejection) and stored.reason is not RejectionReason.NO_FILE
            else None
        )

        try:
            outcome = await self._create(body, image, bound)
        except Exception:
            # Unexpected failures are compensated too
            bound.warning("product_create.aborted")
            await self._compensate(image)
            raise

        if not outcome.success:
            await self._compensate(image)
        outcome.image_rejection = rejection
        return outcome

    async def _create(
        self,
        body: dict[str, Any],
        image: UploadedImage | None,
        bound: Logger,
    ) -> CreationOutcome:
        # VALIDATING
        try:
            validated = ProductCreateForm.model_validate(with_price_fallback(body))
            category = await run_in_threadpool(
                self._repository.find_category, validated.category_name
            )
        except ValidationError as e:
            return self._rejected(body, validation_errors(e), bound)
        except UpstreamStoreError as e:
            return self._compensated(body, e, bound)

        if category is None:
            errors = [FieldError(field="category_name", message=UNKNOWN_CATEGORY_MESSAGE)]
            return self._rejected(body, errors, bound)

        # PERSISTING
        payload = build_insert_payload(validated, category, image)
        try:
            result = await run_in_threadpool(self._repository.insert, payload)
        except UpstreamStoreError as e:
            return self._compensated(body, e, bound)

        if not result.affected_rows:
            bound.warning("product_create.no_rows_affected")
            return CreationOutcome(
                state=CreationState.COMPENSATED, body_data=body, result=result
            )

        bound.bind(product_id=result.inserted_id).info("product_create.completed")
        return CreationOutcome(
            state=CreationState.COMPLETED, body_data=body, result=result, image=image
        )

    @staticmethod
    def _rejected(body: dict[str, Any], errors: list[FieldError], bound: Logger) -> CreationOutcome:
        bound.bind(errors=len(errors)).info("product_create.rejected")
        return CreationOutcome(state=CreationState.REJECTED, body_data=body, errors=errors)

    @staticmethod
    def _compensated(
        body: dict[str, Any], error: UpstreamStoreError, bound: Logger
    ) -> CreationOutcome:
        bound.bind(code=error.code.value, operation=error.operation).warning(
            "product_create.store_failed"
        )
        return CreationOutcome(
            state=CreationState.COMPENSATED, body_data=body, error=error.detail()
        )

    async def _compensate(self, image: UploadedImage | None) -> None:
        if image is None:
            return
        await self._image_store.delete(image.filename, image.folder)
