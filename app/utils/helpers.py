"""
Response envelope helpers.

Every response body looks like:
    {"success": bool, "data": ..., "message": str, "error": {"code": str}}

`error` is only present on failures. Paginated payloads put
{"data": [...], "pagination": {...}} inside `data`.
"""

from typing import Any, List, Optional

from app.services.mongo_service import Page, pagination_meta, serialize_doc


def format_response(success: bool, data: Any, message: str, error: Optional[dict] = None) -> dict:
    body = {
        "success": success,
        "data": serialize_doc(data),
        "message": message,
    }
    if error is not None:
        body["error"] = error
    return body


def format_pagination_response(items: List[dict], total: int, page: Page) -> dict:
    return {
        "data": items,
        "pagination": pagination_meta(total, page),
    }
