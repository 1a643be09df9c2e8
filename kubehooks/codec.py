"""JSON encoding and decoding of review objects exchanged with the API server."""

from __future__ import annotations

import json
from typing import Any

__all__ = ["InvalidReview", "decode_review", "encode_review"]

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

_OBJECT_FIELDS = ("metadata", "spec", "status")


class InvalidReview(ValueError):
    """Raised when a request body is not a well-formed review object."""


def decode_review(payload: bytes | str) -> dict[str, Any]:
    """Parse a request body into a review object.

    The body must be a JSON object, and its ``metadata``, ``spec`` and
    ``status`` members, when present and not null, must be objects too.
    """
    if isinstance(payload, (bytes, bytearray)):
        try:
            text = bytes(payload).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidReview(f"invalid UTF-8 in request body: {exc}") from exc
    else:
        text = payload

    try:
        review = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidReview(str(exc)) from exc

    if not isinstance(review, dict):
        raise InvalidReview(
            f"cannot unmarshal {type(review).__name__} into a review object"
        )

    for field in _OBJECT_FIELDS:
        value = review.get(field)
        if value is None:
            review.pop(field, None)
        elif not isinstance(value, dict):
            raise InvalidReview(f"field {field!r} must be an object")
    return review


def encode_review(review: dict[str, Any]) -> bytes:
    """Serialise a review object to compact JSON bytes with HTML-safe escaping."""
    try:
        text = json.dumps(review, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise InvalidReview(f"cannot encode review: {exc}") from exc
    for char, escape in _HTML_ESCAPES.items():
        text = text.replace(char, escape)
    return text.encode("utf-8")