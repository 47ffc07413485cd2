"""
Quote handlers.

Each handler validates its own input before touching storage, runs on the
connection and transaction the dispatcher opened, and reports problems as
`ValidationError` / `NotFound`. Commit and rollback are the dispatcher's job.
"""

from __future__ import annotations

from typing import Any

from core.context import HandlerContext
from core.db import constraint_errors
from core.errors import NotFound, ValidationError
from core.records import Quote
from core.validation import parse_id, parse_optional_id, required_text

from . import repository, schemas

INVALID_QUOTE_ID = "invalid quote id"
INVALID_CATEGORY_ID = "invalid category id"
MISSING_FIELDS = "author and text are required"
INVALID_IMAGE = "invalid image name"


def _image_name(raw: str | None) -> str | None:
    name = (raw or "").strip()
    if not name:
        return None
    if "/" in name or "\\" in name or name.startswith("."):
        raise ValidationError(INVALID_IMAGE)
    return name


def _validated_fields(payload: schemas.QuoteIn) -> dict[str, Any]:
    if payload is None:
        raise ValidationError()

    author = required_text(payload.author)
    text = required_text(payload.text)
    if not author or not text:
        raise ValidationError(MISSING_FIELDS)

    return {
        "author": author,
        "text": text,
        "category": parse_optional_id(payload.category, message=INVALID_CATEGORY_ID),
        "image": _image_name(payload.image),
    }


def _to_quote(ctx: HandlerContext, quote_id: int, fields: dict[str, Any]) -> Quote:
    return ctx.rows.quote(
        {
            "id": quote_id,
            "author": fields["author"],
            "text": fields["text"],
            "category": fields["category"],
            "imagename": fields["image"],
        }
    )


async def list_quotes(ctx: HandlerContext) -> list[Quote]:
    rows = await repository.list_quotes(ctx.conn, ctx.catalog)
    return ctx.rows.many(rows, ctx.rows.quote, operation="list_quotes")


async def get_quote(ctx: HandlerContext, raw_id: Any) -> Quote:
    quote_id = parse_id(raw_id, message=INVALID_QUOTE_ID)
    row = await repository.get_quote(ctx.conn, ctx.catalog, quote_id)
    if row is None:
        raise NotFound("quote not found")
    return ctx.rows.quote(row)


async def random_quote(ctx: HandlerContext) -> Quote:
    row = await repository.random_quote(ctx.conn, ctx.catalog)
    if row is None:
        raise NotFound("no quotes available")
    return ctx.rows.quote(row)


async def create_quote(ctx: HandlerContext, payload: schemas.QuoteIn) -> Quote:
    fields = _validated_fields(payload)

    with constraint_errors(foreign_key=INVALID_CATEGORY_ID, not_null=MISSING_FIELDS):
        quote_id = await repository.insert_quote(ctx.conn, ctx.catalog, **fields)

    return _to_quote(ctx, quote_id, fields)


async def update_quote(ctx: HandlerContext, raw_id: Any, payload: schemas.QuoteIn) -> Quote:
    quote_id = parse_id(raw_id, message=INVALID_QUOTE_ID)
    fields = _validated_fields(payload)

    with constraint_errors(foreign_key=INVALID_CATEGORY_ID, not_null=MISSING_FIELDS):
        updated = await repository.update_quote(ctx.conn, ctx.catalog, quote_id, **fields)

    if updated == 0:
        raise NotFound("quote not found")
    return _to_quote(ctx, quote_id, fields)


async def delete_quote(ctx: HandlerContext, raw_id: Any) -> None:
    quote_id = parse_id(raw_id, message=INVALID_QUOTE_ID)
    deleted = await repository.delete_quote(ctx.conn, ctx.catalog, quote_id)
    if deleted == 0:
        raise NotFound("quote not found")
