from datetime import UTC, datetime

import sqlalchemy as sa
from pydantic import BaseModel, ConfigDict
from sqlmodel import Field, SQLModel


class Entity(BaseModel):
    """Base class for read models returned by repositories."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class EntityTable(SQLModel, table=False):
    """Base table with an autoincrement integer primary key."""

    id: int | None = Field(
        default=None,
        primary_key=True,
        description="Unique identifier for the row",
    )


class TimestampedTable(EntityTable, table=False):
    """Base table that records its creation time."""

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
    )
