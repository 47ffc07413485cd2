"""
Category handlers.
"""

from __future__ import annotations

from typing import Any

from core.context import HandlerContext
from core.db import constraint_errors
from core.errors import NotFound, ValidationError
from core.records import Category
from core.validation import parse_id, required_text

from . import repository, schemas

INVALID_CATEGORY_ID = "invalid category id"
MISSING_NAME = "category name is required"


async def list_categories(ctx: HandlerContext) -> list[Category]:
    rows = await repository.list_categories(ctx.conn, ctx.catalog)
    return ctx.rows.many(rows, ctx.rows.category, operation="list_categories")


async def get_category(ctx: HandlerContext, raw_id: Any) -> Category:
    category_id = parse_id(raw_id, message=INVALID_CATEGORY_ID)
    row = await repository.get_category(ctx.conn, ctx.catalog, category_id)
    if row is None:
        raise NotFound("category not found")
    return ctx.rows.category(row)


async def create_category(ctx: HandlerContext, payload: schemas.CategoryIn) -> Category:
    name = required_text(payload.name if payload is not None else None)
    if not name:
        raise ValidationError(MISSING_NAME)

    with constraint_errors(not_null=MISSING_NAME, unique="category already exists"):
        category_id = await repository.insert_category(ctx.conn, ctx.catalog, name=name)

    return ctx.rows.category({"id": category_id, "name": name})


async def delete_category(ctx: HandlerContext, raw_id: Any) -> None:
    category_id = parse_id(raw_id, message=INVALID_CATEGORY_ID)

    # Quotes still pointing at the category block the delete.
    with constraint_errors(foreign_key="category in use"):
        deleted = await repository.delete_category(ctx.conn, ctx.catalog, category_id)

    if deleted == 0:
        raise NotFound("category not found")
