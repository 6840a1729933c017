"""Upload processor - gate, stage, parse, validate, distribute and summarize an upload."""

import os
import tempfile
from contextlib import contextmanager
from typing import Iterator, Optional

from src.models.upload import UploadResult, UploadedFile
from src.services.distribution_summary import build_upload_summary
from src.services.row_parser import open_row_source
from src.services.row_validator import collect_tasks
from src.services.supabase_client import find_agents
from src.services.task_distributor import distribute_tasks
from src.utils.config import UploadConfig
from src.utils.errors import (
    FileTooLargeError,
    NoAgentsAvailableError,
    NoFileError,
    NoValidTasksError,
    UnsupportedFormatError,
)
from src.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)


def check_upload(upload: Optional[UploadedFile]) -> UploadedFile:
    """Reject missing, mistyped or oversized uploads before anything is parsed."""
    if upload is None or not upload.filename:
        raise NoFileError()
    if upload.extension not in UploadConfig.ALLOWED_EXTENSIONS:
        raise UnsupportedFormatError()
    if upload.size > UploadConfig.MAX_UPLOAD_BYTES:
        raise FileTooLargeError()
    return upload


def cleanup(file_path: str) -> None:
    """Delete a staged upload; never raises, so it cannot mask a pipeline error."""
    try:
        os.unlink(file_path)
    except FileNotFoundError:
        logger.warning("Staged upload already removed", file_path=file_path)
    except OSError as e:
        logger.error("Failed to remove staged upload", exc_info=True, file_path=file_path, error=str(e))


@contextmanager
def staged_upload(upload: UploadedFile) -> Iterator[str]:
    """Write the upload to a temp file and delete it on every exit path."""
    fd, file_path = tempfile.mkstemp(suffix=upload.extension, dir=UploadConfig.UPLOAD_TMP_DIR)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(upload.content)
        yield file_path
    finally:
        cleanup(file_path)


async def process_upload(upload: Optional[UploadedFile]) -> UploadResult:
    """
    Run one upload through the pipeline.

    Raises an UploadError subclass for every precondition failure and
    PersistenceError when a write fails partway through distribution.
    """
    upload = check_upload(upload)
    logger.info(
        "Processing upload",
        upload_name=upload.filename,
        extension=upload.extension,
        size_bytes=upload.size
    )

    with log_timing("process_upload", logger=logger, upload_name=upload.filename):
        with staged_upload(upload) as file_path:
            source = open_row_source(file_path, upload.extension)
            tasks, stats = collect_tasks(source.rows())
            logger.info(
                "Upload rows validated",
                total_rows=stats.total,
                valid_rows=len(tasks),
                invalid_rows=stats.invalid
            )

            if not tasks:
                raise NoValidTasksError()

            agents = await find_agents()
            if not agents:
                raise NoAgentsAvailableError()

            distributed = await distribute_tasks(
                tasks,
                agents,
                transactional=UploadConfig.DISTRIBUTION_TRANSACTIONAL
            )

        summary = build_upload_summary(distributed, agents, stats)

    logger.info(
        "Upload distributed",
        total_tasks=summary.total_tasks,
        agent_count=len(summary.distribution)
    )
    return UploadResult(summary=summary, tasks=distributed)
