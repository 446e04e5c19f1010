"""Shared Pydantic building blocks."""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire; readable from ORM rows."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    total: int
    pages: int
    page: int
    limit: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        return cls(total=total, pages=-(-total // limit) if limit else 0, page=page, limit=limit)


class UserSummary(CamelModel):
    """Public identity embedded in other resources."""
    id: Union[int, str]
    name: str
    image: Optional[str] = None


class OwnerRef(CamelModel):
    id: Union[int, str]
    name: str


# Literal identities shown in place of the owner of an anonymous idea.
ANONYMOUS_OWNER = OwnerRef(id="anonymous", name="Anonymous")
ANONYMOUS_USER = UserSummary(id="anonymous", name="Anonymous", image=None)
