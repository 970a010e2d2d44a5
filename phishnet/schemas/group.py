"""Group and target schemas."""

from pydantic import EmailStr, Field, field_validator

from phishnet.schemas.common import CamelModel, OrgScopedRecord, blank_to_none


# =============================================================================
# Groups
# =============================================================================

class GroupCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class GroupUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None


class GroupRead(OrgScopedRecord):
    name: str
    description: str | None = None


class GroupWithTargetCount(GroupRead):
    """Group as listed: target_count is computed at read time."""
    target_count: int = 0


# =============================================================================
# Targets
# =============================================================================

class TargetCreate(CamelModel):
    """Insert shape for a target; also the per-row import contract."""
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    position: str | None = Field(None, max_length=255)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("position", mode="before")
    @classmethod
    def blank_position(cls, v):
        return blank_to_none(v)


class TargetUpdate(CamelModel):
    first_name: str | None = Field(None, min_length=1, max_length=255)
    last_name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    position: str | None = Field(None, max_length=255)

    @field_validator("first_name", "last_name", "email", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("position", mode="before")
    @classmethod
    def blank_position(cls, v):
        return blank_to_none(v)


class TargetRead(OrgScopedRecord):
    first_name: str
    last_name: str
    email: str
    position: str | None = None
    group_id: int


# =============================================================================
# Import
# =============================================================================

class ImportRowError(CamelModel):
    row: int  # 1-based line number, header is row 1
    error: list[dict] | str


class ImportResult(CamelModel):
    imported: int = 0
    failed: int = 0
    errors: list[ImportRowError] | None = None
