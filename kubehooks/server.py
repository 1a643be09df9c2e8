"""HTTP(S) server that routes review requests to the webhook handlers."""

from __future__ import annotations

import argparse
import logging
import ssl
from collections.abc import Callable, Sequence
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlsplit

from kubehooks import admission, authn, authz, mutation
from kubehooks.codec import InvalidReview

__all__ = ["WebhookRequestHandler", "respond", "build_server", "main"]

log = logging.getLogger(__name__)

ROUTES: dict[str, Callable[[bytes], bytes]] = {
    "/authenticate": authn.handle,
    "/authorize": authz.handle,
    "/validate": admission.handle,
    "/mutate": mutation.handle,
}

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
TLS_PORT = 443
PLAIN_PORT = 4443


def _error(status: HTTPStatus, message: str) -> tuple[int, dict[str, str], bytes]:
    headers = {"Content-Type": TEXT_CONTENT_TYPE, "X-Content-Type-Options": "nosniff"}
    return int(status), headers, f"{message}\n".encode("utf-8")


def respond(method: str, path: str, body: bytes) -> tuple[int, dict[str, str], bytes]:
    """Answer one request, returning its status code, headers and body."""
    route = urlsplit(path).path
    handler = ROUTES.get(route)
    if handler is None:
        return _error(HTTPStatus.NOT_FOUND, "404 page not found")

    log.info("Receiving %s", method)
    if method != "POST":
        return _error(HTTPStatus.METHOD_NOT_ALLOWED, "Only Accept POST requests")

    try:
        result = handler(body)
    except InvalidReview as exc:
        return _error(HTTPStatus.BAD_REQUEST, str(exc))
    except Exception as exc:  # noqa: BLE001 - reported to the caller as a server error
        log.exception("handler for %s failed", route)
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, str(exc))
    return int(HTTPStatus.OK), {"Content-Type": JSON_CONTENT_TYPE}, result


class WebhookRequestHandler(BaseHTTPRequestHandler):
    """Request handler that serves every webhook endpoint."""

    protocol_version = "HTTP/1.1"

    def _dispatch(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length > 0 else b""
        status, headers, payload = respond(self.command, self.path, body)
        self.send_response(status)
        for name, value in headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(payload)

    do_GET = _dispatch
    do_POST = _dispatch
    do_PUT = _dispatch
    do_PATCH = _dispatch
    do_DELETE = _dispatch
    do_HEAD = _dispatch
    do_OPTIONS = _dispatch

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        log.debug("%s - %s", self.address_string(), format % args)


def build_server(
    host: str, port: int, cert_file: str | None, key_file: str | None
) -> ThreadingHTTPServer:
    """Create the webhook server, serving HTTPS when a certificate is given."""
    if bool(cert_file) != bool(key_file):
        raise ValueError(
            "both --tls-cert-file and --tls-private-key-file are required for HTTPS"
        )
    server = ThreadingHTTPServer((host, port), WebhookRequestHandler)
    if cert_file and key_file:
        try:
            context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
            context.load_cert_chain(cert_file, key_file)
            server.socket = context.wrap_socket(server.socket, server_side=True)
        except BaseException:
            server.server_close()
            raise
    return server


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="kubehooks", description=__doc__)
    parser.add_argument(
        "-tls-cert-file",
        "--tls-cert-file",
        dest="cert_file",
        default="",
        help="File containing the default x509 Certificate for HTTPS.",
    )
    parser.add_argument(
        "-tls-private-key-file",
        "--tls-private-key-file",
        dest="key_file",
        default="",
        help="File containing the default x509 private key matching --tls-cert-file.",
    )
    parser.add_argument("--host", default="", help="Address to listen on.")
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help=f"Port to listen on ({TLS_PORT} with TLS, {PLAIN_PORT} without).",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the webhook server until interrupted; return the exit status."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    args = _parse_args(argv)
    tls = bool(args.cert_file or args.key_file)
    port = args.port if args.port is not None else (TLS_PORT if tls else PLAIN_PORT)

    try:
        server = build_server(args.host, port, args.cert_file, args.key_file)
    except (OSError, ValueError, ssl.SSLError) as exc:
        log.error("%s", exc)
        return 1

    log.info("Listening on port %d for requests...", server.server_address[1])
    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0