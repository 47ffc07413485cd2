"""
Quote API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from core.records import Quote
from dispatch.dependencies import get_dispatcher
from dispatch.dispatcher import RequestDispatcher
from dispatch.operations import Operation, Request

from . import schemas

router = APIRouter()


@router.get("/qt")
async def list_quotes(
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
) -> list[Quote]:
    return await dispatcher.dispatch(Request(Operation.LIST_QUOTES))


# Registered before /qt/{quote_id} so "rand" is not taken for an id.
@router.get("/qt/rand")
async def random_quote(
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
) -> Quote:
    return await dispatcher.dispatch(Request(Operation.RANDOM_QUOTE))


@router.get("/qt/{quote_id}")
async def get_quote(
    quote_id: str,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
) -> Quote:
    return await dispatcher.dispatch(Request(Operation.GET_QUOTE, record_id=quote_id))


@router.post("/qt", status_code=status.HTTP_201_CREATED)
async def create_quote(
    payload: schemas.QuoteIn,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
) -> Quote:
    return await dispatcher.dispatch(Request(Operation.CREATE_QUOTE, payload=payload))


@router.put("/qt/{quote_id}")
async def update_quote(
    quote_id: str,
    payload: schemas.QuoteIn,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
) -> Quote:
    return await dispatcher.dispatch(
        Request(Operation.UPDATE_QUOTE, record_id=quote_id, payload=payload)
    )


@router.delete("/qt/{quote_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quote(
    quote_id: str,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
) -> Response:
    await dispatcher.dispatch(Request(Operation.DELETE_QUOTE, record_id=quote_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
