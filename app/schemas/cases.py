"""Pydantic schemas for public case submission."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

SUBDOMAIN_PATTERN = r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CaseSubmissionRequest(BaseModel):
    """A case reported through a company's public form.

    Field names follow the dashboard's camelCase wire format via aliases.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    subdomain: str = Field(
        ...,
        min_length=3,
        max_length=63,
        pattern=SUBDOMAIN_PATTERN,
        description="Company subdomain the case is filed against.",
    )
    title: str = Field(..., min_length=5, max_length=500)
    description: str = Field(..., min_length=10, max_length=5000)
    category_key: str = Field(..., alias="categoryKey", min_length=1)
    type_key: str | None = Field(None, alias="typeKey")
    priority_key: str | None = Field(None, alias="priorityKey")
    severity_key: str | None = Field(None, alias="severityKey")
    is_anonymous: bool = Field(True, alias="isAnonymous")
    visibility: Literal["public", "internal", "restricted"] | None = None
    reporter_name: str | None = Field(None, alias="reporterName", max_length=200)
    reporter_email: str | None = Field(
        None,
        alias="reporterEmail",
        max_length=254,
        pattern=EMAIL_PATTERN,
    )
    reporter_phone: str | None = Field(None, alias="reporterPhone", max_length=50)
    tags: list[str] | None = Field(None, max_length=20)

    @model_validator(mode="after")
    def _identified_reporter_needs_contact(self) -> "CaseSubmissionRequest":
        if not self.is_anonymous and not (self.reporter_name or self.reporter_email):
            raise ValueError("reporterName or reporterEmail is required when isAnonymous is false")
        return self

    def to_dashboard_payload(self) -> dict:
        """Serialize in the dashboard's camelCase format, dropping unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CaseSummary(BaseModel):
    """Case metadata returned by the dashboard after creation."""

    id: str
    case_number: str = Field(..., alias="caseNumber")
    title: str
    status: str
    created_at: str = Field(..., alias="createdAt")


class CaseSubmissionResponse(BaseModel):
    """Documented shape of a successful case submission."""

    success: bool
    case: CaseSummary | None = None
    message: str | None = None
