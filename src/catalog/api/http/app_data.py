from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.catalog.core.services.database.db_session import DbSessionService
from src.catalog.core.services.storage.image_store import ImageStore

if TYPE_CHECKING:
    from src.catalog.api.http.middleware.authorization import AuthorizationPolicy


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    image_store: ImageStore
    authorization_policy: AuthorizationPolicy
