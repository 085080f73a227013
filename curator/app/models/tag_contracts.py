from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _normalize_optional_text(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    normalized = value.strip()
    if not normalized:
        return None
    return normalized


class TagRef(BaseModel):
    """Just the id of an attached tag; enough to diff association sets."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int = Field(gt=0)


class Tag(TagRef):
    name: str

    @field_validator("name", mode="before")
    @classmethod
    def _normalize_name(cls, value: object) -> str:
        normalized = _normalize_optional_text(value)
        if normalized is None:
            raise ValueError("tag name must be a non-empty string")
        return normalized


class TagPage(BaseModel):
    """One page of the `/tags` catalog."""

    model_config = ConfigDict(extra="ignore")

    data: list[Tag] = Field(default_factory=list)
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=20, ge=1)
    total: int = Field(default=0, ge=0)
    total_pages: int = Field(default=0, ge=0)

    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages


class RemoteErrorPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    error: str | None = None

    @field_validator("error", mode="before")
    @classmethod
    def _normalize_error(cls, value: object) -> str | None:
        return _normalize_optional_text(value)
