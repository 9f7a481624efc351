"""News posts and partner schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from apa.domain.enums import PostCategory
from apa.schemas.common import ImageUrl


class PostCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    title: str = Field(..., min_length=3, max_length=200)
    content: str = Field(..., min_length=10)
    excerpt: str | None = Field(default=None, max_length=300)
    image: ImageUrl = ""
    category: PostCategory = PostCategory.NOTICIA
    author: str = "APA"
    isActive: bool = True
    isHighlighted: bool = False
    publishDate: datetime | None = None


class PostUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=3, max_length=200)
    content: str | None = Field(default=None, min_length=10)
    excerpt: str | None = Field(default=None, max_length=300)
    image: ImageUrl | None = None
    category: PostCategory | None = None
    author: str | None = None
    isActive: bool | None = None
    isHighlighted: bool | None = None
    publishDate: datetime | None = None


class PartnerCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=120)
    logo: ImageUrl = Field(..., min_length=1)
    website: ImageUrl | None = None
    description: str | None = None
    order: int = Field(default=0, ge=0)
    isActive: bool = True


class PartnerUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=2, max_length=120)
    logo: ImageUrl | None = None
    website: ImageUrl | None = None
    description: str | None = None
    order: int | None = Field(default=None, ge=0)
    isActive: bool | None = None
