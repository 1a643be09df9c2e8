"""Token review webhook: authenticates bearer tokens for the API server."""

from __future__ import annotations

import copy
import logging
from typing import Any

from kubehooks.codec import decode_review, encode_review

__all__ = ["authenticate", "handle"]

log = logging.getLogger(__name__)

MOCK_USERNAME = "mock"
MOCK_UID = "mock"
MOCK_GROUPS = ("group-mock",)


def authenticate(review: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of a TokenReview with its status filled in.

    Every token is accepted and mapped to a fixed mock user.
    """
    result = copy.deepcopy(review)
    status = result.setdefault("status", {})
    status["authenticated"] = True
    status["user"] = {
        "username": MOCK_USERNAME,
        "uid": MOCK_UID,
        "groups": list(MOCK_GROUPS),
    }
    return result


def handle(payload: bytes | str) -> bytes:
    """Decode a TokenReview request body, authenticate it and encode the reply."""
    text = payload.decode("utf-8", "replace") if isinstance(payload, bytes) else payload
    log.info("Receiving Token: %s", text)
    review = decode_review(payload)
    return encode_review(authenticate(review))