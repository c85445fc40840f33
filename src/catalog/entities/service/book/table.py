"""Book database table model."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from src.catalog.entities._base import EntityTable


class BookTable(EntityTable, table=True):
    """Database persistence model for books.

    Mirrors the ``book`` table: the domain entity is kept separate so the
    repository controls what leaves the data layer.
    """

    __tablename__ = "book"

    name: str = Field(max_length=255, nullable=False)
    author: str = Field(max_length=1000, nullable=False)
    # Naive TIMESTAMP; left unset, the database fills in the current time
    publish_date: datetime | None = Field(
        default=None,
        sa_type=sa.DateTime(timezone=False),
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.current_timestamp()},
    )
    description: str = Field(max_length=255, nullable=False)
