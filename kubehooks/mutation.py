"""Mutating admission webhook: injects a label into pods through a JSON patch."""

from __future__ import annotations

import base64
import copy
import logging
from collections.abc import Iterator
from typing import Any

from kubehooks.admission import (
    _GUARDED_OPERATIONS,
    _Rejected,
    _deny,
    _handle_review,
    _new_response,
    _pod_from_request,
)
from kubehooks.codec import encode_review

__all__ = ["create_json_patch", "admit", "handle"]

log = logging.getLogger(__name__)

LABEL_KEY = "my-label-mock"
LABEL_VALUE = "test"
PATCH_TYPE_JSON_PATCH = "JSONPatch"


def _escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _diff(current: Any, modified: Any, path: str) -> Iterator[dict[str, Any]]:
    if isinstance(current, dict) and isinstance(modified, dict):
        for key, value in modified.items():
            child = f"{path}/{_escape(str(key))}"
            if key in current:
                yield from _diff(current[key], value, child)
            else:
                yield {"op": "add", "path": child, "value": copy.deepcopy(value)}
        for key in current:
            if key not in modified:
                yield {"op": "remove", "path": f"{path}/{_escape(str(key))}"}
        return

    if (
        isinstance(current, list)
        and isinstance(modified, list)
        and len(current) == len(modified)
    ):
        for index, (old, new) in enumerate(zip(current, modified)):
            yield from _diff(old, new, f"{path}/{index}")
        return

    if type(current) is not type(modified) or current != modified:
        yield {"op": "replace", "path": path, "value": copy.deepcopy(modified)}


def create_json_patch(modified: Any, current: Any) -> list[dict[str, Any]]:
    """Return the RFC 6902 operations that turn ``current`` into ``modified``."""
    return list(_diff(current, modified, ""))


def _normalised(pod: dict[str, Any]) -> dict[str, Any]:
    current = copy.deepcopy(pod)
    metadata = current.get("metadata") or {}
    current["metadata"] = metadata
    if metadata.get("labels") is None:
        metadata.pop("labels", None)
    return current


def admit(request: Any) -> dict[str, Any]:
    """Decide an AdmissionRequest and return the AdmissionResponse.

    On create and update a JSON patch adding the ``my-label-mock: test`` label
    is attached; every valid pod request is allowed.
    """
    response = _new_response(request)
    try:
        pod = _pod_from_request(request)
    except _Rejected as exc:
        return _deny(response, str(exc))

    if request.get("operation") in _GUARDED_OPERATIONS:
        current = _normalised(pod)
        modified = copy.deepcopy(current)
        modified["metadata"].setdefault("labels", {})[LABEL_KEY] = LABEL_VALUE
        patch = create_json_patch(modified, current)
        response["patch"] = base64.b64encode(encode_review(patch)).decode("ascii")
        response["patchType"] = PATCH_TYPE_JSON_PATCH

    response["allowed"] = True
    return response


def handle(payload: bytes | str) -> bytes:
    """Decode an AdmissionReview body, admit its request and encode the reply."""
    return _handle_review(payload, admit)