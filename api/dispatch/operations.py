"""
Closed set of operations the dispatcher knows how to run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Operation(str, Enum):
    LIST_QUOTES = "list_quotes"
    GET_QUOTE = "get_quote"
    RANDOM_QUOTE = "random_quote"
    CREATE_QUOTE = "create_quote"
    UPDATE_QUOTE = "update_quote"
    DELETE_QUOTE = "delete_quote"

    LIST_CATEGORIES = "list_categories"
    GET_CATEGORY = "get_category"
    CREATE_CATEGORY = "create_category"
    DELETE_CATEGORY = "delete_category"


@dataclass(frozen=True)
class Request:
    operation: Operation
    # Raw path identifier; handlers validate it.
    record_id: str | None = None
    payload: Any = None
