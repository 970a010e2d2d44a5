"""Shared schema base classes."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for all API schemas.

    Python attributes are snake_case; JSON on the wire is camelCase
    (``firstName``, ``organizationId``). Either spelling is accepted on input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class TimestampedRecord(CamelModel):
    """Fields every stored entity carries."""
    id: int
    created_at: datetime
    updated_at: datetime


class OrgScopedRecord(TimestampedRecord):
    """Stored entity that belongs to an organization."""
    organization_id: int


def blank_to_none(value):
    """Treat empty or whitespace-only strings as missing."""
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def changed_fields(data: BaseModel, clearable: tuple[str, ...] = ()) -> dict:
    """
    Fields the client actually sent, keyed by attribute name.

    An explicit null only clears fields listed in ``clearable``; for any other
    field it means "leave unchanged".
    """
    return {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key in clearable
    }
