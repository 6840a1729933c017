"""Test helper functions."""

import http.client
import io
import time
import uuid
from typing import Dict, Optional
from unittest.mock import Mock

import openpyxl
import xlwt
from jose import jwt


def make_access_token(
    user_id: str = "admin-1",
    role: str = "admin",
    name: str = "Admin User",
    secret: str = "test-jwt-secret",
    expires_in: int = 3600
) -> str:
    """Sign a token shaped like the ones the login endpoint issues."""
    payload = {
        "user": {"_id": user_id, "role": role, "name": name},
        "exp": int(time.time()) + expires_in,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(role: str = "admin", user_id: str = "admin-1") -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_access_token(user_id=user_id, role=role)}"}


def csv_bytes(rows: list[list[str]], header: Optional[list[str]] = None) -> bytes:
    """Build CSV file content from a header and rows."""
    header = header or ["FirstName", "Phone", "Notes"]
    lines = [",".join(header)] + [",".join(row) for row in rows]
    return ("\r\n".join(lines) + "\r\n").encode("utf-8")


def xlsx_bytes(sheets: Dict[str, list[list]]) -> bytes:
    """Build an .xlsx workbook with the given sheets, in order."""
    workbook = openpyxl.Workbook()
    workbook.remove(workbook.active)
    for title, rows in sheets.items():
        sheet = workbook.create_sheet(title)
        for row in rows:
            sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def xls_bytes(sheets: Dict[str, list[list]]) -> bytes:
    """Build a legacy BIFF .xls workbook; None leaves a cell unwritten."""
    workbook = xlwt.Workbook()
    for title, rows in sheets.items():
        sheet = workbook.add_sheet(title)
        for row_index, row in enumerate(rows):
            for column_index, value in enumerate(row):
                if value is not None:
                    sheet.write(row_index, column_index, value)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def multipart_body(
    field_name: str,
    filename: str,
    content: bytes,
    content_type: str = "application/octet-stream",
    extra_fields: Optional[Dict[str, str]] = None
) -> tuple[bytes, str]:
    """Encode one file part (plus optional text fields) as multipart/form-data."""
    boundary = f"----taskdesk{uuid.uuid4().hex}"
    parts = []
    for name, value in (extra_fields or {}).items():
        parts.append(
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="{name}"\r\n\r\n'
            f"{value}\r\n".encode("utf-8")
        )
    parts.append(
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{field_name}"; filename="{filename}"\r\n'
        f"Content-Type: {content_type}\r\n\r\n".encode("utf-8")
        + content
        + b"\r\n"
    )
    parts.append(f"--{boundary}--\r\n".encode("utf-8"))
    return b"".join(parts), f"multipart/form-data; boundary={boundary}"


def build_handler(
    handler_class,
    method: str = "POST",
    path: str = "/",
    headers: Optional[Dict[str, str]] = None,
    body: bytes = b""
):
    """Instantiate a BaseHTTPRequestHandler subclass without a socket.

    Response status and headers are captured through mocks; the body is
    written to ``handler.wfile``.
    """
    headers = dict(headers or {})
    if body:
        headers.setdefault("Content-Length", str(len(body)))
    raw_headers = "".join(f"{key}: {value}\r\n" for key, value in headers.items()) + "\r\n"

    h = handler_class.__new__(handler_class)
    h.command = method
    h.path = path
    h.request_version = "HTTP/1.1"
    h.headers = http.client.parse_headers(io.BytesIO(raw_headers.encode("latin-1")))
    h.rfile = io.BytesIO(body)
    h.wfile = io.BytesIO()
    h.send_response = Mock()
    h.send_header = Mock()
    h.end_headers = Mock()
    return h


def response_status(h) -> int:
    return h.send_response.call_args[0][0]
