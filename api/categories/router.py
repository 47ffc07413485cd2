"""
Category API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from core.records import Category
from dispatch.dependencies import get_dispatcher
from dispatch.dispatcher import RequestDispatcher
from dispatch.operations import Operation, Request

from . import schemas

router = APIRouter()


@router.get("/cat")
async def list_categories(
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
) -> list[Category]:
    return await dispatcher.dispatch(Request(Operation.LIST_CATEGORIES))


@router.get("/cat/{category_id}")
async def get_category(
    category_id: str,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
) -> Category:
    return await dispatcher.dispatch(Request(Operation.GET_CATEGORY, record_id=category_id))


@router.post("/cat", status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: schemas.CategoryIn,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
) -> Category:
    return await dispatcher.dispatch(Request(Operation.CREATE_CATEGORY, payload=payload))


@router.delete("/cat/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: str,
    dispatcher: RequestDispatcher = Depends(get_dispatcher),
) -> Response:
    await dispatcher.dispatch(Request(Operation.DELETE_CATEGORY, record_id=category_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
