"""
Row mapping: raw storage rows -> domain records.

Nullable columns are converted exactly once, here. Everything past this
module works with plain strings where "" means absent.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from .images import ImageResolver
from .records import Category, Quote

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RowDecodeError(ValueError):
    pass


def optional_text(value: Any) -> str:
    """
    NULL -> "", anything else -> its string form.
    """
    if value is None:
        return ""
    return str(value)


def _required(row: dict[str, Any], column: str) -> Any:
    try:
        value = row[column]
    except KeyError as exc:
        raise RowDecodeError(f"Row is missing column {column!r}.") from exc
    if value is None:
        raise RowDecodeError(f"Column {column!r} is NULL.")
    return value


class RowMapper:
    def __init__(self, images: ImageResolver):
        self._images = images

    @property
    def images(self) -> ImageResolver:
        return self._images

    def quote(self, row: dict[str, Any]) -> Quote:
        quote_id = _required(row, "id")
        author = _required(row, "author")
        text = _required(row, "text")
        category = optional_text(row.get("category"))
        image = optional_text(row.get("imagename"))

        return Quote(
            id=str(quote_id),
            author=str(author),
            text=str(text),
            category=category,
            image=self._images.resolve(image, category),
        )

    def category(self, row: dict[str, Any]) -> Category:
        category_id = _required(row, "id")
        name = _required(row, "name")
        return Category(id=str(category_id), name=str(name))

    def many(
        self,
        rows: Iterable[dict[str, Any]],
        decode: Callable[[dict[str, Any]], T],
        *,
        operation: str,
    ) -> list[T]:
        """
        Decode every row, skipping (and logging) the ones that fail.
        """
        out: list[T] = []
        for row in rows:
            try:
                out.append(decode(row))
            except RowDecodeError as exc:
                logger.warning("row_decode_failed operation=%s error=%s", operation, exc)
        return out
