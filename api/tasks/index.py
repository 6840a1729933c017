"""Task list and update endpoint for Vercel."""

from http.server import BaseHTTPRequestHandler
from urllib.parse import parse_qs, urlparse
import asyncio
import json

from src.services.auth import authenticate_request, require_admin
from src.services.task_service import apply_task_update, get_tasks
from src.utils.errors import TaskDeskError
from src.utils.http import read_body, send_json
from src.utils.logging import correlation_context, get_structured_logger, setup_logging
from src.utils.logging_config import LoggingConfig

setup_logging()
_logger = get_structured_logger(__name__)


def query_param(path: str, name: str) -> str:
    values = parse_qs(urlparse(path).query).get(name)
    return values[0] if values else ""


class handler(BaseHTTPRequestHandler):
    """Vercel serverless function handler for /api/tasks."""

    def do_GET(self):
        """List all tasks newest first, or one agent's tasks with ``?agentId=``."""
        with correlation_context(self.headers.get(LoggingConfig.LOG_CORRELATION_ID_HEADER)):
            try:
                require_admin(authenticate_request(self.headers))
                agent_id = query_param(self.path, "agentId") or None
                tasks = asyncio.run(get_tasks(agent_id))
                send_json(self, 200, [task.model_dump(mode="json", by_alias=True) for task in tasks])
            except TaskDeskError as e:
                if e.status_code >= 500:
                    _logger.error("Get tasks error", exc_info=True, error=str(e))
                    send_json(self, 500, {"message": "Server error"})
                    return
                send_json(self, e.status_code, {"message": e.message})
            except Exception as e:
                _logger.error("Get tasks error", exc_info=True, error=str(e))
                send_json(self, 500, {"message": "Server error"})

    def do_PATCH(self):
        """Update status and/or notes of the task named by ``?taskId=``."""
        with correlation_context(self.headers.get(LoggingConfig.LOG_CORRELATION_ID_HEADER)):
            try:
                user = authenticate_request(self.headers)
                task_id = query_param(self.path, "taskId")
                if not task_id:
                    send_json(self, 404, {"message": "Task not found"})
                    return

                raw_body = read_body(self)
                try:
                    body = json.loads(raw_body) if raw_body else {}
                except json.JSONDecodeError:
                    send_json(self, 400, {"message": "Invalid updates!"})
                    return

                task = asyncio.run(apply_task_update(task_id, body, user))
                send_json(self, 200, task.model_dump(mode="json", by_alias=True))
            except TaskDeskError as e:
                if e.status_code >= 500:
                    _logger.error("Update task error", exc_info=True, error=str(e))
                    send_json(self, 500, {"message": "Server error"})
                    return
                send_json(self, e.status_code, {"message": e.message})
            except Exception as e:
                _logger.error("Update task error", exc_info=True, error=str(e))
                send_json(self, 500, {"message": "Server error"})
