"""
Pydantic schemas for quote endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, StrictInt, StrictStr


class QuoteIn(BaseModel):
    """
    Create/replace payload. `id` in the body is ignored; `category` may be a
    numeric string or an integer, never a boolean or float; `image` is the
    bare asset name.
    """

    author: str | None = Field(default=None, max_length=500)
    text: str | None = Field(default=None, max_length=10000)
    category: StrictStr | StrictInt | None = None
    image: str | None = Field(default=None, max_length=255)
