import sqlalchemy as sa
from pydantic import BaseModel
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


class Entity(BaseModel):
    """Base entity class with a store-generated integer identifier."""

    id: int | None = PydanticField(
        default=None,
        description="Identifier assigned by the store on insert",
    )


class EntityTable(SQLModel, table=False):
    """Base table class with an auto-incrementing BIGINT primary key."""

    id: int | None = Field(
        default=None,
        sa_column_kwargs={"autoincrement": True},
        sa_type=sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
        primary_key=True,
        description="Identifier assigned by the store on insert",
    )
