# =============================================================================
# core/models/lookup.py - Academic Lookup Schemas
# =============================================================================
# Rows returned by the city -> university -> school -> department cascade.
# The same shapes come back from the lookup RPCs and from the fallback
# table queries.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class LookupOption(BaseModel):
    """Plain id/name pair (cities, universities without domains)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str


class UniversityLookupRow(LookupOption):
    """University with optional email domains used during verification."""

    email_domains: list[str] | None = None
    allowed_email_domains: list[str] | None = None


class SchoolLookupRow(LookupOption):
    """A school (faculty) inside a university."""

    university_id: str | None = Field(default=None)


class DepartmentLookupRow(LookupOption):
    """A department inside a school."""

    school_id: str | None = Field(default=None)
