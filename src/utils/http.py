"""Helpers shared by the serverless request handlers."""

import json
from http.server import BaseHTTPRequestHandler
from typing import Any

from src.utils.logging import get_correlation_id
from src.utils.logging_config import LoggingConfig


def read_body(request: BaseHTTPRequestHandler) -> bytes:
    """Read the request body announced by Content-Length."""
    content_length = int(request.headers.get('Content-Length') or 0)
    return request.rfile.read(content_length) if content_length > 0 else b""


def send_json(request: BaseHTTPRequestHandler, status: int, payload: Any) -> None:
    """Write a JSON response with the current correlation ID attached."""
    request.send_response(status)
    request.send_header('Content-Type', 'application/json')
    correlation_id = get_correlation_id()
    if correlation_id:
        request.send_header(LoggingConfig.LOG_CORRELATION_ID_HEADER, correlation_id)
    request.end_headers()
    request.wfile.write(json.dumps(payload).encode('utf-8'))
