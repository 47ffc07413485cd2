"""
FastAPI dependencies for dispatcher-backed routes.
"""

from __future__ import annotations

from fastapi import Request

from .dispatcher import RequestDispatcher


def get_dispatcher(request: Request) -> RequestDispatcher:
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise RuntimeError("Dispatcher is not initialized. Is the app lifespan running?")
    return dispatcher
