import base64
import http.client
import json
import threading

import pytest

from kubehooks.server import build_server, main, respond


def _post(path, document):
    return respond("POST", path, json.dumps(document).encode("utf-8"))


def test_non_post_is_rejected_with_405():
    status, headers, body = respond("GET", "/authenticate", b"")
    assert status == 405
    assert body == b"Only Accept POST requests\n"
    assert headers["Content-Type"].startswith("text/plain")


def test_unknown_path_is_404():
    status, _, body = respond("POST", "/nowhere", b"{}")
    assert status == 404
    assert body == b"404 page not found\n"


def test_authenticate_returns_mock_user():
    review = {"apiVersion": "authentication.k8s.io/v1beta1", "kind": "TokenReview",
              "spec": {"token": "token"}}
    status, headers, body = _post("/authenticate", review)
    assert status == 200
    assert headers["Content-Type"] == "application/json"
    result = json.loads(body)
    assert result["status"]["authenticated"] is True
    assert result["status"]["user"]["username"] == "mock"
    assert result["spec"] == review["spec"]


def test_query_string_is_ignored_for_routing():
    status, _, body = respond("POST", "/authenticate?timeout=30s", b"{}")
    assert status == 200
    assert json.loads(body)["status"]["authenticated"] is True


def test_invalid_json_is_400():
    status, headers, body = respond("POST", "/authenticate", b"{not json")
    assert status == 400
    assert body.endswith(b"\n")
    assert headers["X-Content-Type-Options"] == "nosniff"


def test_authorize_allows_demo_user_and_denies_others():
    allowed = _post("/authorize", {"spec": {"user": "demo-user"}})
    assert allowed[0] == 200
    assert json.loads(allowed[2])["status"]["allowed"] is True

    denied = _post("/authorize", {"spec": {"user": "bob",
                                           "resourceAttributes": {"resource": "pods"}}})
    assert denied[0] == 200
    status = json.loads(denied[2])["status"]
    assert status["allowed"] is False
    assert "bob" in status["reason"] and "pods" in status["reason"]


def test_authorize_without_resource_attributes_is_400():
    status, _, _ = _post("/authorize", {"spec": {"user": "bob"}})
    assert status == 400


def _admission_review(name, operation="CREATE"):
    return {
        "apiVersion": "admission.k8s.io/v1",
        "kind": "AdmissionReview",
        "request": {
            "uid": "uid-1",
            "resource": {"group": "", "version": "v1", "resource": "pods"},
            "operation": operation,
            "object": {"metadata": {"name": name}},
        },
    }


def test_validate_rejects_mock_app_pod():
    status, _, body = _post("/validate", _admission_review("my-mock-app-1"))
    assert status == 200
    response = json.loads(body)["response"]
    assert response["uid"] == "uid-1"
    assert response["allowed"] is False
    assert response["status"]["message"] == (
        "Keep calm and this is a webhook demo in the cluster!"
    )


def test_validate_allows_other_pods():
    status, _, body = _post("/validate", _admission_review("web"))
    assert status == 200
    assert json.loads(body)["response"]["allowed"] is True


def test_mutate_attaches_json_patch():
    status, _, body = _post("/mutate", _admission_review("web", "UPDATE"))
    assert status == 200
    response = json.loads(body)["response"]
    assert response["allowed"] is True
    assert response["patchType"] == "JSONPatch"
    patch = json.loads(base64.b64decode(response["patch"]))
    assert any("my-label-mock" in json.dumps(op) for op in patch)


def test_build_server_requires_both_tls_files():
    with pytest.raises(ValueError):
        build_server("127.0.0.1", 0, "cert.pem", None)


def test_main_fails_with_missing_certificate(tmp_path):
    missing = tmp_path / "absent.pem"
    code = main(["--host", "127.0.0.1", "--port", "0",
                 "--tls-cert-file", str(missing),
                 "--tls-private-key-file", str(missing)])
    assert code == 1


@pytest.fixture
def live_server():
    server = build_server("127.0.0.1", 0, None, None)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server.server_address[1]
    server.shutdown()
    server.server_close()
    thread.join(timeout=5)


def test_live_server_answers_post(live_server):
    connection = http.client.HTTPConnection("127.0.0.1", live_server, timeout=5)
    body = json.dumps({"spec": {"token": "token"}})
    connection.request("POST", "/authenticate", body=body,
                       headers={"Content-Type": "application/json"})
    reply = connection.getresponse()
    data = reply.read()
    connection.close()
    assert reply.status == 200
    assert reply.getheader("Content-Type") == "application/json"
    assert json.loads(data)["status"]["user"]["uid"] == "mock"


def test_live_server_rejects_get(live_server):
    connection = http.client.HTTPConnection("127.0.0.1", live_server, timeout=5)
    connection.request("GET", "/validate")
    reply = connection.getresponse()
    data = reply.read()
    connection.close()
    assert reply.status == 405
    assert data == b"Only Accept POST requests\n"