"""Subject access review webhook: authorises requests for the API server."""

from __future__ import annotations

import copy
import json
import logging
from typing import Any

from kubehooks.codec import InvalidReview, decode_review, encode_review

__all__ = ["authorize", "handle"]

log = logging.getLogger(__name__)

ALLOWED_USER = "demo-user"


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def authorize(review: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of a SubjectAccessReview with its decision filled in.

    Only ``demo-user`` is allowed; anyone else is denied with a reason that
    names the resource, which must then be present in the request.
    """
    result = copy.deepcopy(review)
    spec = result.get("spec") or {}
    status = result.setdefault("status", {})
    user = spec.get("user", "")

    if user == ALLOWED_USER:
        status["allowed"] = True
        return result

    attributes = spec.get("resourceAttributes")
    if not isinstance(attributes, dict):
        raise InvalidReview("spec.resourceAttributes is required")
    resource = attributes.get("resource", "")
    status.setdefault("allowed", False)
    status["reason"] = (
        f"User {_quote(str(user))} is not allowed to access {_quote(str(resource))}"
    )
    return result


def handle(payload: bytes | str) -> bytes:
    """Decode a SubjectAccessReview request body, decide it and encode the reply."""
    text = payload.decode("utf-8", "replace") if isinstance(payload, bytes) else payload
    log.info("Receiving SubjectAccessReview: %s", text)
    review = decode_review(payload)
    return encode_review(authorize(review))