"""Task file upload endpoint for Vercel."""

from http.server import BaseHTTPRequestHandler
import asyncio

from src.services.auth import authenticate_request, require_admin
from src.services.upload_processor import process_upload
from src.utils.config import UploadConfig
from src.utils.errors import TaskDeskError
from src.utils.http import read_body, send_json
from src.utils.logging import correlation_context, get_structured_logger, mask_user_id, setup_logging
from src.utils.logging_config import LoggingConfig
from src.utils.multipart import parse_multipart_form

setup_logging()
_logger = get_structured_logger(__name__)


class handler(BaseHTTPRequestHandler):
    """Vercel serverless function handler for task uploads (admin only)."""

    def do_POST(self):
        """Handle POST /api/tasks/upload with a multipart ``file`` field."""
        with correlation_context(self.headers.get(LoggingConfig.LOG_CORRELATION_ID_HEADER)):
            try:
                user = require_admin(authenticate_request(self.headers))
            except TaskDeskError as e:
                send_json(self, e.status_code, {"message": e.message})
                return

            try:
                raw_body = read_body(self)
                _, files = parse_multipart_form(self.headers.get('Content-Type'), raw_body)
                upload = files.get(UploadConfig.UPLOAD_FIELD_NAME)

                result = asyncio.run(process_upload(upload))

                _logger.info(
                    "Task upload completed",
                    total_tasks=result.summary.total_tasks,
                    uploaded_by=mask_user_id(user.id)
                )
                send_json(self, 201, {
                    "message": "Tasks uploaded and distributed successfully",
                    **result.model_dump(mode="json", by_alias=True)
                })

            except TaskDeskError as e:
                if e.status_code < 500:
                    _logger.info("Task upload rejected", reason=e.message, error_type=type(e).__name__)
                    send_json(self, e.status_code, {"message": e.message})
                    return
                _logger.error("File upload error", exc_info=True, error=str(e))
                send_json(self, 500, {"message": "Error processing file", "error": e.message})

            except Exception as e:
                _logger.error("File upload error", exc_info=True, error=str(e))
                send_json(self, 500, {"message": "Error processing file", "error": str(e)})
