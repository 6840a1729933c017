"""Row parser - turn an uploaded CSV or workbook file into raw row mappings.

Both sources yield the same shape: a dict keyed by the header row's column
names, in file order. Rows are produced lazily; a source's ``rows()`` is a
generator and can only be consumed once.
"""

import csv
import zipfile
from typing import Any, Iterator, Optional, Protocol

import openpyxl
import xlrd
from xlrd.compdoc import CompDocError
from openpyxl.utils.exceptions import InvalidFileException

from src.utils.errors import ParseError, UnsupportedFormatError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

RawRow = dict[str, Any]


class RowSource(Protocol):
    """Anything that can produce raw rows from a staged upload."""

    path: str

    def rows(self) -> Iterator[RawRow]:
        ...


def cell_to_text(value: Any) -> Optional[str]:
    """Render a workbook cell as the text a spreadsheet user would see."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        # Phones typed into a sheet are usually stored as numbers
        return str(int(value))
    if isinstance(value, str):
        return value if value != "" else None
    return str(value)


def rows_from_table(table: list[tuple[Any, ...]]) -> Iterator[RawRow]:
    """Convert a header-first table of cells into row mappings.

    Empty cells are left out of the mapping and rows without any
    value are skipped.
    """
    if not table:
        return
    header = [cell_to_text(cell) for cell in table[0]]
    for values in table[1:]:
        row: RawRow = {}
        for column, value in zip(header, values):
            text = cell_to_text(value)
            if column is None or text is None:
                continue
            row[column] = text
        if row:
            yield row


class CsvRowSource:
    """Delimited text source; the first line is the header."""

    def __init__(self, path: str, extension: str = ".csv"):
        self.path = path
        self.extension = extension

    def rows(self) -> Iterator[RawRow]:
        try:
            with open(self.path, newline="", encoding="utf-8-sig") as handle:
                reader = csv.DictReader(handle, strict=True)
                for row in reader:
                    # Cells beyond the header land under the None key
                    row.pop(None, None)
                    yield row
        except (csv.Error, UnicodeDecodeError) as e:
            logger.warning("CSV parse failed", error=str(e))
            raise ParseError(f"Malformed CSV file: {e}") from e


class WorkbookRowSource:
    """Spreadsheet workbook source; only the first sheet is read."""

    def __init__(self, path: str, extension: str = ".xlsx"):
        self.path = path
        self.extension = extension

    def read_first_sheet(self) -> list[tuple[Any, ...]]:
        if self.extension == ".xls":
            return self._read_xls()
        return self._read_xlsx()

    def _read_xlsx(self) -> list[tuple[Any, ...]]:
        try:
            workbook = openpyxl.load_workbook(self.path, read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as e:
            raise ParseError(f"Unreadable workbook: {e}") from e
        try:
            if not workbook.worksheets:
                return []
            return list(workbook.worksheets[0].iter_rows(values_only=True))
        except (zipfile.BadZipFile, KeyError, ValueError) as e:
            raise ParseError(f"Unreadable workbook: {e}") from e
        finally:
            workbook.close()

    def _read_xls(self) -> list[tuple[Any, ...]]:
        try:
            book = xlrd.open_workbook(self.path, on_demand=True)
        except (xlrd.XLRDError, CompDocError, OSError, AssertionError) as e:
            raise ParseError(f"Unreadable workbook: {e}") from e
        try:
            if book.nsheets == 0:
                return []
            sheet = book.sheet_by_index(0)
            return [tuple(sheet.row_values(index)) for index in range(sheet.nrows)]
        finally:
            book.release_resources()

    def rows(self) -> Iterator[RawRow]:
        table = self.read_first_sheet()
        logger.debug("Workbook sheet loaded", row_count=max(len(table) - 1, 0))
        yield from rows_from_table(table)


ROW_SOURCES = {
    ".csv": CsvRowSource,
    ".xlsx": WorkbookRowSource,
    ".xls": WorkbookRowSource,
}


def open_row_source(path: str, extension: str) -> RowSource:
    """Pick the row source for a file by its extension."""
    extension = extension.lower()
    source_class = ROW_SOURCES.get(extension)
    if source_class is None:
        raise UnsupportedFormatError()
    return source_class(path, extension)
