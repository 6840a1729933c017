"""Health check endpoint."""

from http.server import BaseHTTPRequestHandler
import os

from src.utils.config import AuthConfig
from src.utils.http import send_json


def readiness_checks() -> dict[str, bool]:
    """Report which required settings are present, without exposing values."""
    return {
        "database_configured": bool(os.environ.get("SUPABASE_URL") and os.environ.get("SUPABASE_SERVICE_ROLE_KEY")),
        "auth_configured": bool(AuthConfig.get_jwt_secret()),
    }


class handler(BaseHTTPRequestHandler):
    """Health check handler for Vercel serverless function."""

    def do_GET(self):
        checks = readiness_checks()
        status = "ok" if all(checks.values()) else "degraded"
        send_json(self, 200, {"status": status, "service": "taskdesk-backend", "checks": checks})

    def do_POST(self):
        """Same as GET."""
        self.do_GET()
