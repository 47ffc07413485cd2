"""
Pydantic schemas for category endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class CategoryIn(BaseModel):
    # Trimmed and checked for emptiness by the handler.
    name: str | None = Field(default=None, max_length=200)
