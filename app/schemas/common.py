# app/schemas/common.py

from datetime import date, datetime
from typing import Annotated, Any, ClassVar, Generic, List, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

T = TypeVar("T")


class CamelModel(BaseModel):
    """
    Base for API schemas: camelCase on the wire, snake_case in Python.
    Requests may use either form.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _date_only(value: Any) -> Any:
    # "2025-03-01T10:30:00Z" -> "2025-03-01"
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10 and value[10] in "T ":
        return value[:10]
    return value


DateOnly = Annotated[date, BeforeValidator(_date_only)]


class PatchModel(CamelModel):
    """
    Base for partial-update payloads.

    Only fields the client actually sent end up in the patch. Fields listed in
    ``NOT_NULLABLE`` may be omitted but not explicitly set to null.
    """

    NOT_NULLABLE: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        for name in self.NOT_NULLABLE:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise PydanticCustomError(
                    "null_not_allowed",
                    "{field} cannot be null",
                    {"field": to_camel(name)},
                )
        return self

    def to_patch(self) -> dict[str, Any]:
        """Attribute name -> value for every field present in the request."""
        return self.model_dump(exclude_unset=True)


class Page(CamelModel, Generic[T]):
    data: List[T]
    total: int = Field(..., description="Number of matching rows")
    page: int
    limit: int
    total_pages: int
