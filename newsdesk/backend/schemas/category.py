"""
Category Schemas.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: str = Field(default="", max_length=500)
    seo_meta_title: str = Field(default="", max_length=60)
    seo_meta_description: str = Field(default="", max_length=160)
    display_order: int = Field(default=0, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v


class CategoryCreate(CategoryBase):
    """Schema for creating a category. The slug is derived from the name when omitted."""

    slug: str | None = Field(default=None, max_length=80, pattern=SLUG_PATTERN)


class CategoryUpdate(BaseModel):
    """Schema for updating a category. All fields optional."""

    name: str | None = Field(default=None, min_length=1, max_length=50)
    slug: str | None = Field(default=None, max_length=80, pattern=SLUG_PATTERN)
    description: str | None = Field(default=None, max_length=500)
    seo_meta_title: str | None = Field(default=None, max_length=60)
    seo_meta_description: str | None = Field(default=None, max_length=160)
    display_order: int | None = Field(default=None, ge=0)


class CategoryResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: str
    seo_meta_title: str
    seo_meta_description: str
    display_order: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CategorySummary(BaseModel):
    """Category as embedded in articles."""

    id: str
    name: str
    slug: str

    model_config = ConfigDict(from_attributes=True)


class CategoryStats(BaseModel):
    category_id: str
    published_articles: int
    total_views: int
