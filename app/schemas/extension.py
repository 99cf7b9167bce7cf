"""Pydantic schemas for extension catalog responses."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Extension(BaseModel):
    """A single catalog record."""

    id: str = Field(..., min_length=1, description="Stable identifier used in /api/extensions/{id}.")
    name: str = Field(..., min_length=1, description="Display name, matched by the search endpoint.")
    description: str = Field("", description="Short description of what the extension does.")
    author: str = Field("", description="Publisher or maintainer name.")
    version: str = Field("", description="Latest published version.")
    category: str = Field("", description="Catalog category (e.g., 'productivity').")
    url: str | None = Field(None, description="Homepage or store listing.")


class ExtensionListResponse(BaseModel):
    """List payload shared by the catalog and search endpoints."""

    count: int = Field(..., ge=0, description="Number of records in 'extensions'.")
    extensions: list[Extension] = Field(default_factory=list)
