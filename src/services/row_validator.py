"""Row validation - decide which raw rows become tasks and normalize them."""

import re
from typing import Any, Iterable, Optional

from src.models.task import CanonicalTask
from src.models.upload import RowStats
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

FIRST_NAME_COLUMN = "FirstName"
PHONE_COLUMN = "Phone"
NOTES_COLUMN = "Notes"

PHONE_RE = re.compile(r"[0-9]{10}")

MISSING_FIRST_NAME = "missing_first_name"
MISSING_PHONE = "missing_phone"
INVALID_PHONE = "invalid_phone"


def _text(row: Any, column: str) -> Optional[str]:
    """Read a cell as text; anything that is not a non-empty string is absent."""
    if not isinstance(row, dict):
        return None
    value = row.get(column)
    if isinstance(value, str) and value:
        return value
    return None


def rejection_reason(row: Any) -> Optional[str]:
    """Return why a row is not an admissible task, or None if it is."""
    first_name = _text(row, FIRST_NAME_COLUMN)
    if first_name is None or not first_name.strip():
        return MISSING_FIRST_NAME
    phone = _text(row, PHONE_COLUMN)
    if phone is None:
        return MISSING_PHONE
    if not PHONE_RE.fullmatch(phone):
        return INVALID_PHONE
    return None


def is_valid_task(row: Any) -> bool:
    return rejection_reason(row) is None


def normalize_row(row: dict[str, Any]) -> CanonicalTask:
    """Build the canonical task for a row that passed validation."""
    return CanonicalTask(
        first_name=row[FIRST_NAME_COLUMN].strip(),
        phone=row[PHONE_COLUMN],
        notes=(_text(row, NOTES_COLUMN) or "").strip(),
    )


def validate_row(row: Any) -> Optional[CanonicalTask]:
    """Validate and normalize a row; None means the row is dropped."""
    if not is_valid_task(row):
        return None
    return normalize_row(row)


def collect_tasks(rows: Iterable[Any]) -> tuple[list[CanonicalTask], RowStats]:
    """
    Consume a row sequence, keeping the admissible rows as canonical tasks.

    Rejected rows are only counted; the reasons are kept for diagnostics
    and never reported per row.
    """
    tasks: list[CanonicalTask] = []
    stats = RowStats()
    for row in rows:
        stats.total += 1
        reason = rejection_reason(row)
        if reason is not None:
            stats.record_rejection(reason)
            continue
        tasks.append(normalize_row(row))

    if stats.invalid:
        logger.info(
            "Dropped invalid rows",
            total_rows=stats.total,
            invalid_rows=stats.invalid,
            rejections=stats.rejections
        )
    return tasks, stats
