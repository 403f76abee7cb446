"""
WSGI host adapter

Bridges HTTP POST requests into a Server session. HTTP-level problems get an
HTTP status; everything past that point is answered as XML-RPC with 200.
"""

import logging
from http import HTTPStatus
from typing import Any, Callable, Dict, Iterable, List, Tuple

from seam_xmlrpc.telemetry.metrics import increment_counter
from seam_xmlrpc.telemetry.tracer import extract_trace_context, with_trace_context

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONTENT_LENGTH = 10 * 1024 * 1024


def _environ_headers(environ: Dict[str, Any]) -> Dict[str, str]:
    headers = {}
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            headers[key[5:].replace("_", "-").lower()] = value
    return headers


class WSGIApplication:
    """WSGI callable serving one Server session

    Args:
        server: Server session
        max_content_length: Largest accepted request body in bytes
    """

    def __init__(self, server, max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH):
        self.server = server
        self.max_content_length = max_content_length

    def __call__(self, environ: Dict[str, Any], start_response: Callable) -> Iterable[bytes]:
        if environ.get("REQUEST_METHOD", "GET").upper() != "POST":
            return self._error(start_response, HTTPStatus.METHOD_NOT_ALLOWED, [("Allow", "POST")])

        content_type = environ.get("CONTENT_TYPE", "")
        if content_type.split(";")[0].strip().lower() != "text/xml":
            return self._error(start_response, HTTPStatus.BAD_REQUEST)

        try:
            length = int(environ.get("CONTENT_LENGTH") or "")
        except ValueError:
            return self._error(start_response, HTTPStatus.LENGTH_REQUIRED)
        if length < 0:
            return self._error(start_response, HTTPStatus.LENGTH_REQUIRED)
        if length > self.max_content_length:
            return self._error(start_response, HTTPStatus.REQUEST_ENTITY_TOO_LARGE)

        body = environ["wsgi.input"].read(length)
        if len(body) != length:
            return self._error(start_response, HTTPStatus.BAD_REQUEST)

        increment_counter("xmlrpc.transport.http.received", 1)
        with with_trace_context(extract_trace_context(_environ_headers(environ))):
            response = self.server.process(body)

        start_response("200 OK", [
            ("Content-Type", "text/xml; charset=utf-8"),
            ("Content-Length", str(len(response))),
        ])
        return [response]

    @staticmethod
    def _error(start_response: Callable, status: HTTPStatus,
               extra_headers: List[Tuple[str, str]] = None) -> List[bytes]:
        logger.warning(f"Rejected HTTP request: {status.value} {status.phrase}")
        increment_counter("xmlrpc.transport.http.rejected", 1, {"status": str(status.value)})
        body = status.phrase.encode("ascii")
        headers = [("Content-Type", "text/plain"), ("Content-Length", str(len(body)))]
        start_response(f"{status.value} {status.phrase}", headers + (extra_headers or []))
        return [body]
