import json

import pytest

from kubehooks.authn import authenticate, handle
from kubehooks.codec import InvalidReview

REQUEST = {
    "apiVersion": "authentication.k8s.io/v1beta1",
    "kind": "TokenReview",
    "spec": {"token": "token"},
}


def test_authenticate_marks_authenticated():
    result = authenticate(REQUEST)
    assert result["status"]["authenticated"] is True


def test_authenticate_sets_mock_user():
    user = authenticate(REQUEST)["status"]["user"]
    assert user["username"] == "mock"
    assert user["uid"] == "mock"
    assert user["groups"] == ["group-mock"]
    assert "extra" not in user


def test_authenticate_keeps_request_fields():
    result = authenticate(REQUEST)
    assert result["spec"] == REQUEST["spec"]
    assert result["kind"] == REQUEST["kind"]
    assert result["apiVersion"] == REQUEST["apiVersion"]


def test_authenticate_does_not_mutate_input():
    original = json.loads(json.dumps(REQUEST))
    authenticate(REQUEST)
    assert REQUEST == original


def test_authenticate_overrides_existing_status():
    review = dict(REQUEST, status={"authenticated": False, "error": "old"})
    result = authenticate(review)
    assert result["status"]["authenticated"] is True
    assert result["status"]["error"] == "old"


def test_handle_round_trip():
    reply = json.loads(handle(json.dumps(REQUEST).encode()))
    assert reply["status"]["authenticated"] is True
    assert reply["status"]["user"]["groups"] == ["group-mock"]
    assert reply["spec"] == REQUEST["spec"]


def test_handle_accepts_str():
    reply = json.loads(handle(json.dumps(REQUEST)))
    assert reply["status"]["user"]["username"] == "mock"


@pytest.mark.parametrize("payload", [b"", b"{", b"[]"])
def test_handle_rejects_invalid_body(payload):
    with pytest.raises(InvalidReview):
        handle(payload)