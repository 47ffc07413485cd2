"""
Domain records returned by handlers and serialized by the HTTP layer.
"""

from __future__ import annotations

from pydantic import BaseModel


class Quote(BaseModel):
    id: str
    author: str
    text: str
    category: str = ""
    # Resolved display path, never the stored image name.
    image: str = ""


class Category(BaseModel):
    id: str
    name: str
