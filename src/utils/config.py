"""Upload and auth configuration read from environment variables."""

import os
import tempfile


class UploadConfig:
    """Upload pipeline configuration."""

    MAX_UPLOAD_BYTES = int(os.environ.get("UPLOAD_MAX_BYTES", str(5 * 1024 * 1024)))
    ALLOWED_EXTENSIONS = (".csv", ".xlsx", ".xls")
    UPLOAD_TMP_DIR = os.environ.get("UPLOAD_TMP_DIR") or tempfile.gettempdir()
    UPLOAD_FIELD_NAME = "file"
    DISTRIBUTION_TRANSACTIONAL = os.environ.get("DISTRIBUTION_TRANSACTIONAL", "false").lower() == "true"


class AuthConfig:
    """Access token configuration."""

    JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
    ADMIN_ROLE = "admin"
    AGENT_ROLE = "agent"

    @staticmethod
    def get_jwt_secret() -> str:
        """Read the signing secret at call time so rotations apply without a redeploy."""
        return os.environ.get("JWT_SECRET", "").strip()
