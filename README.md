# kubehooks

Webhook handlers for a Kubernetes API server. The package uses only the
Python standard library.

| Path            | Review                | Decision                                                                                          |
|-----------------|-----------------------|---------------------------------------------------------------------------------------------------|
| `/authenticate` | `TokenReview`         | Every token is accepted. It maps to the user `mock` (uid `mock`) in the group `group-mock`.       |
| `/authorize`    | `SubjectAccessReview` | Only the user `demo-user` is allowed. Anyone else is denied with a reason naming the user and the resource. |
| `/validate`     | `AdmissionReview`     | A pod whose name contains `mock-app` is refused on `CREATE` and `UPDATE`. Other pod requests are allowed. |
| `/mutate`       | `AdmissionReview`     | On `CREATE` and `UPDATE` a pod gets the label `my-label-mock: test` through a base64-encoded JSON Patch (`patchType: JSONPatch`). |

Both admission paths refuse requests for any resource other than core `v1`
pods. The status message of that refusal is
`expect resource to be /v1, Resource=pods`.

## HTTP behaviour

On the four paths above, the server answers as follows:

- `POST` returns `200` with an `application/json` body.
- Any other method returns `405 Only Accept POST requests`.
- A body that cannot be decoded returns `400` with the error message. This
  includes:
  - a body that is not a JSON object;
  - a `metadata`, `spec` or `status` member that is not an object;
  - an admission review with no `request`;
  - a denied `SubjectAccessReview` without `spec.resourceAttributes`.
- An unexpected failure returns `500`.

Any other path returns `404 page not found`.

## Installation

```sh
pip install .
```

To run the tests:

```sh
pip install ".[test]"
pytest
```

## Running the server

The `kubehooks` command serves HTTPS when it is given a certificate and a key:

```sh
kubehooks --tls-cert-file server.crt --tls-private-key-file server.key
```

The certificate and key are PEM files, and the API server must trust the
certificate. Point the API server's webhook configuration at the path you
need.

Options:

- `--tls-cert-file`, `--tls-private-key-file`: the certificate and its private
  key. These can also be written with a single dash. Give both or neither.
  If only one is given, the command exits with status 1.
- `--host`: the address to listen on. The default is all interfaces.
- `--port`: the port to listen on. The default is `443` with TLS and `4443`
  without.

The server logs each request at INFO level and runs until interrupted.

`kubehooks.server` has three more entry points for programmatic use:

- `build_server(host, port, cert_file, key_file)` returns the configured
  `ThreadingHTTPServer` without starting it.
- `respond(method, path, body)` answers a single request as a
  `(status, headers, body)` tuple, with no socket involved.
- `WebhookRequestHandler` is the request handler class that the server uses.

## Using the handlers directly

Each module has a `handle(payload)` function. It takes the raw request body
and returns the encoded response. The HTTP endpoints use these same
functions.

```python
from kubehooks import authn

body = b'{"apiVersion": "authentication.k8s.io/v1beta1", "kind": "TokenReview", "spec": {"token": "token"}}'
print(authn.handle(body))
```

The decision functions work on already-decoded data:

- `authn.authenticate(review)` returns a copy of a `TokenReview` with its
  status filled in.
- `authz.authorize(review)` returns a copy of a `SubjectAccessReview` with
  its decision.
- `admission.validate(request)` returns the `AdmissionResponse` for an
  `AdmissionRequest`. The response carries the request's `uid`.
- `mutation.admit(request)` does the same as `validate`, adding the label
  patch.
- `mutation.create_json_patch(modified, current)` returns the RFC 6902
  operations that turn `current` into `modified`.

`kubehooks.codec` converts between bytes and review documents:

- `decode_review(payload)` parses a body into a `dict`.
- `encode_review(review)` writes compact JSON with `<`, `>` and `&` escaped.
- Malformed input raises `InvalidReview`, a subclass of `ValueError`.

## Custom resources

`kubehooks.crd` models the `Foo` resource of the `apps.educative.io/v1beta1`
group (`GROUP_VERSION`). It contains:

- `GroupVersion`, with `api_version()`.
- `FooSpec`, with a single `foo` string field.
- `FooStatus`, which is empty.
- `Foo` and `FooList`, each with `to_dict()` and `from_dict()`.
  `from_dict()` raises `ValueError` on badly shaped input.
- `Scheme`, a registry from `(apiVersion, kind)` to type:
  - `add_known_type` refuses to register a different type under a name that
    is already taken.
  - `lookup` raises `KeyError` for unknown kinds.

```python
from kubehooks.crd import Scheme, add_to_scheme

scheme = Scheme()
add_to_scheme(scheme)
foo_type = scheme.lookup("apps.educative.io/v1beta1", "Foo")
foo = foo_type.from_dict({"spec": {"foo": "bar"}})
```

## What it does not do

- **No real decisions.** The handlers make fixed demonstration decisions. No
  token is actually verified, and no access policy or admission policy can be
  configured.
- **No cluster access.** The package never talks to the API server.
- **No controller.** Nothing watches or reconciles `Foo` objects.
- **No object conversion.** The `Scheme` only records types and does not
  encode or decode objects by itself.
- **No operations endpoints.** The server has no metrics, health or readiness
  endpoints, and no leader election.