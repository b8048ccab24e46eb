import re
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


SORTABLE_FIELDS = ("order", "title", "slug", "status", "id")


class JobStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


def slugify(title: str) -> str:
    """Lowercase the title and collapse whitespace runs into single hyphens."""
    return re.sub(r"\s+", "-", title.lower())


def parse_tags(text: str) -> List[str]:
    """Split the editor's comma-separated tag field, dropping blanks."""
    return [tag.strip() for tag in text.split(",") if tag.strip()]


def _require_title(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Title is required.")
    return value


class Job(BaseModel):
    id: str
    title: str
    slug: str
    status: JobStatus = JobStatus.ACTIVE
    tags: List[str] = Field(default_factory=list)
    order: int


class JobCreate(BaseModel):
    title: str
    tags: List[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        return _require_title(value)


class JobUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    status: Optional[JobStatus] = None
    tags: Optional[List[str]] = None

    class Config:
        extra = "forbid"

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _require_title(value)


class JobFilters(BaseModel):
    search: str = ""
    status: Optional[JobStatus] = None
    page: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1, alias="pageSize")
    sort: str = "order"

    class Config:
        populate_by_name = True

    @field_validator("status", mode="before")
    @classmethod
    def empty_status_means_all(cls, value):
        return value or None

    @field_validator("sort")
    @classmethod
    def sortable(cls, value: str) -> str:
        if value not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort jobs by {value!r}")
        return value


class JobPage(BaseModel):
    jobs: List[Job]
    total: int
    page: int
    page_size: int = Field(alias="pageSize")

    class Config:
        populate_by_name = True
