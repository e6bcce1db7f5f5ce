"""Persist uploaded product images under random filenames."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

import aiofiles
import aiofiles.os
from loguru import logger

# Declared content type -> stored extension
EXTENSION_MAP: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


class Upload(Protocol):
    """The subset of ``starlette.datastructures.UploadFile`` the store needs."""

    filename: str | None
    content_type: str | None

    async def read(self, size: int = -1) -> bytes: ...


class UploadFolder(str, Enum):
    """Sub-folders an upload may be directed to."""

    BASE = ""
    AVATAR = "avatar"

    @classmethod
    def parse(cls, value: str | None) -> UploadFolder:
        """Map a client-supplied folder indicator onto the enumeration.

        Anything other than a known folder name lands in the base directory.
        """
        if value == cls.AVATAR.value:
            return cls.AVATAR
        if value:
            logger.bind(folder=value).warning("image_store.unknown_folder")
        return cls.BASE


class RejectionReason(str, Enum):
    NO_FILE = "no_file"
    UNSUPPORTED_TYPE = "unsupported_type"
    TOO_LARGE = "too_large"


@dataclass(frozen=True)
class UploadedImage:
    filename: str
    folder: UploadFolder
    storage_path: Path


@dataclass(frozen=True)
class ImageRejection:
    reason: RejectionReason
    content_type: str | None = None


def _content_type(upload: Upload) -> str:
    return (upload.content_type or "").split(";", 1)[0].strip().lower()


class ImageStore:
    """Write uploads to ``base_dir`` (or one of its allowed sub-folders)."""

    def __init__(self, base_dir: str | Path, max_upload_bytes: int | None = None) -> None:
        self.base_dir = Path(base_dir)
        self.max_upload_bytes = max_upload_bytes

    def directory_for(self, folder: UploadFolder = UploadFolder.BASE) -> Path:
        if folder is UploadFolder.BASE:
            return self.base_dir
        return self.base_dir / folder.value

    def generate_filename(self, content_type: str) -> str:
        return uuid.uuid4().hex + EXTENSION_MAP[content_type]

    async def save(
        self,
        upload: Upload | None,
        folder: UploadFolder = UploadFolder.BASE,
    ) -> UploadedImage | ImageRejection:
        """Store ``upload`` and return where it went, or why it was not stored.

        A rejected upload is never written; the request carries on as if no
        file had been attached.
        """
        if upload is None or not upload.filename:
            return ImageRejection(RejectionReason.NO_FILE)

        content_type = _content_type(upload)
        if content_type not in EXTENSION_MAP:
            logger.bind(content_type=content_type).info("image_store.rejected_type")
            return ImageRejection(RejectionReason.UNSUPPORTED_TYPE, content_type)

        content = await upload.read()
        if self.max_upload_bytes is not None and len(content) > self.max_upload_bytes:
            logger.bind(size=len(content), limit=self.max_upload_bytes).info(
                "image_store.rejected_size"
            )
            return ImageRejection(RejectionReason.TOO_LARGE, content_type)

        directory = self.directory_for(folder)
        await aiofiles.os.makedirs(directory, exist_ok=True)

        filename = self.generate_filename(content_type)
        path = directory / filename
        async with aiofiles.open(path, "wb") as f:
            await f.write(content)

        logger.bind(filename=filename, folder=folder.value, size=len(content)).info(
            "image_store.saved"
        )
        return UploadedImage(filename=filename, folder=folder, storage_path=path)

    async def delete(self, filename: str, folder: UploadFolder = UploadFolder.BASE) -> bool:
        """Remove a stored image. Failures are logged and reported as False."""
        if not filename or Path(filename).name != filename:
            logger.bind(filename=filename, reason="invalid filename").warning(
                "image_store.delete_failed"
            )
            return False

        path = self.directory_for(folder) / filename
        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            logger.bind(filename=filename, reason=f"{type(e).__name__}: {e}").warning(
                "image_store.delete_failed"
            )
            return False

        logger.bind(filename=filename, folder=folder.value).info("image_store.deleted")
        return True
