"""multipart/form-data request body parsing on top of python-multipart."""

from typing import Optional

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from src.models.upload import UploadedFile
from src.utils.errors import ParseError


class _FormCollector:
    """Parser callbacks that buffer each part and file it by field name."""

    def __init__(self):
        self.fields: dict[str, str] = {}
        self.files: dict[str, UploadedFile] = {}
        self._headers: dict[bytes, bytes] = {}
        self._header_field = b""
        self._header_value = b""
        self._data = bytearray()

    def callbacks(self) -> dict:
        return {
            "on_part_begin": self.on_part_begin,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
        }

    def on_part_begin(self) -> None:
        self._headers = {}
        self._data = bytearray()

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def on_header_end(self) -> None:
        self._headers[self._header_field.lower()] = self._header_value
        self._header_field = b""
        self._header_value = b""

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._data += data[start:end]

    def on_part_end(self) -> None:
        _, disposition = parse_options_header(self._headers.get(b"content-disposition"))
        name = disposition.get(b"name")
        if not name:
            return
        field_name = name.decode("utf-8")
        filename = disposition.get(b"filename")
        content_type, options = parse_options_header(self._headers.get(b"content-type"))

        if filename is None:
            charset = options.get(b"charset", b"utf-8").decode("latin-1")
            self.fields[field_name] = bytes(self._data).decode(charset, errors="replace")
            return

        self.files[field_name] = UploadedFile(
            filename=filename.decode("utf-8"),
            content=bytes(self._data),
            content_type=content_type.decode("latin-1") or "application/octet-stream"
        )


def parse_multipart_form(
    content_type: Optional[str],
    body: bytes
) -> tuple[dict[str, str], dict[str, UploadedFile]]:
    """
    Split a multipart/form-data body into text fields and file parts.

    Returns empty mappings when the request is not multipart. A body that
    does not match its declared boundary raises ParseError.
    """
    mime_type, params = parse_options_header(content_type)
    boundary = params.get(b"boundary")
    if mime_type.lower() != b"multipart/form-data" or not boundary:
        return {}, {}

    collector = _FormCollector()
    parser = MultipartParser(boundary, collector.callbacks())
    try:
        parser.write(body)
        parser.finalize()
    except MultipartParseError as e:
        raise ParseError(f"Malformed multipart body: {e}") from e
    return collector.fields, collector.files
