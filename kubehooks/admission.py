"""Validating admission webhook: rejects demo pods created or updated in the cluster."""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable

from kubehooks.codec import InvalidReview, decode_review, encode_review

__all__ = ["validate", "handle"]

log = logging.getLogger(__name__)

DENIAL_MESSAGE = "Keep calm and this is a webhook demo in the cluster!"
BLOCKED_NAME_FRAGMENT = "mock-app"

_POD_GVR = ("", "v1", "pods")
_GVR_FIELDS = ("group", "version", "resource")
_GUARDED_OPERATIONS = frozenset({"CREATE", "UPDATE"})


class _Rejected(Exception):
    """The request cannot be admitted; the message goes back to the API server."""


def _format_gvr(group: str, version: str, resource: str) -> str:
    return f"{group}/{version}, Resource={resource}"


def _json_kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _requested_gvr(request: dict[str, Any]) -> tuple[str, str, str]:
    resource = request.get("resource")
    if resource is None:
        resource = {}
    if not isinstance(resource, dict):
        raise InvalidReview("request.resource must be an object")
    parts = []
    for field in _GVR_FIELDS:
        value = resource.get(field)
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise InvalidReview(f"request.resource.{field} must be a string")
        parts.append(value)
    group, version, name = parts
    return group, version, name


def _new_response(request: Any) -> dict[str, Any]:
    if not isinstance(request, dict):
        raise InvalidReview("admission review has no request")
    uid = request.get("uid")
    if uid is None:
        uid = ""
    if not isinstance(uid, str):
        raise InvalidReview("request.uid must be a string")
    return {"uid": uid, "allowed": False}


def _deny(response: dict[str, Any], message: str) -> dict[str, Any]:
    response["allowed"] = False
    response["status"] = {"metadata": {}, "message": message}
    return response


def _pod_from_request(request: dict[str, Any]) -> dict[str, Any]:
    """Check that the request concerns pods and return a copy of its object."""
    requested = _requested_gvr(request)
    if requested != _POD_GVR:
        log.warning(
            "expect resource to be %s, but got %s",
            _format_gvr(*_POD_GVR),
            _format_gvr(*requested),
        )
        raise _Rejected(f"expect resource to be {_format_gvr(*_POD_GVR)}")

    pod = request.get("object")
    if pod is None:
        raise _Rejected("unexpected end of JSON input")
    if not isinstance(pod, dict):
        raise _Rejected(f"cannot unmarshal {_json_kind(pod)} into a Pod object")

    metadata = pod.get("metadata")
    if metadata is None:
        return copy.deepcopy(pod)
    if not isinstance(metadata, dict):
        raise _Rejected(f"cannot unmarshal {_json_kind(metadata)} into Pod metadata")
    name = metadata.get("name")
    if name is not None and not isinstance(name, str):
        raise _Rejected(f"cannot unmarshal {_json_kind(name)} into Pod name")
    labels = metadata.get("labels")
    if labels is not None:
        if not isinstance(labels, dict):
            raise _Rejected(f"cannot unmarshal {_json_kind(labels)} into Pod labels")
        if not all(isinstance(value, str) for value in labels.values()):
            raise _Rejected("Pod label values must be strings")
    return copy.deepcopy(pod)


def _pod_name(pod: dict[str, Any]) -> str:
    return (pod.get("metadata") or {}).get("name") or ""


def validate(request: Any) -> dict[str, Any]:
    """Decide an AdmissionRequest and return the AdmissionResponse.

    Pods whose name contains ``mock-app`` are refused on create and update;
    everything else about pods is allowed. Requests for other resources and
    undecodable pods are refused with the error as the status message.
    """
    response = _new_response(request)
    try:
        pod = _pod_from_request(request)
    except _Rejected as exc:
        return _deny(response, str(exc))

    if (
        request.get("operation") in _GUARDED_OPERATIONS
        and BLOCKED_NAME_FRAGMENT in _pod_name(pod)
    ):
        return _deny(response, DENIAL_MESSAGE)

    response["allowed"] = True
    return response


def _handle_review(
    payload: bytes | str, decide: Callable[[Any], dict[str, Any]]
) -> bytes:
    review = decode_review(payload)
    review["response"] = decide(review.get("request"))
    return encode_review(review)


def handle(payload: bytes | str) -> bytes:
    """Decode an AdmissionReview body, validate its request and encode the reply."""
    return _handle_review(payload, validate)