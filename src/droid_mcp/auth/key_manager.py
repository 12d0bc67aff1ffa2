"""API key storage for HTTP transport auth.

The key lives in a file readable only by the current user
(``~/.config/droid-mcp/auth.key``, or ``$DROID_MCP_KEY_DIR/auth.key``).
"""

import logging
import os
import secrets
from pathlib import Path

logger = logging.getLogger(__name__)


def _key_file() -> Path:
    base = os.environ.get("DROID_MCP_KEY_DIR", "").strip()
    directory = Path(base) if base else Path.home() / ".config" / "droid-mcp"
    return directory / "auth.key"


class AuthKeyManager:
    @staticmethod
    def generate_key() -> str:
        """Generate a new 32-byte random API key and store it. Returns the hex key."""
        key = secrets.token_hex(32)
        key_file = _key_file()
        key_file.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(key_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(key)
        os.chmod(key_file, 0o600)
        logger.info("API key generated and stored in %s", key_file)
        return key

    @staticmethod
    def load_key() -> str | None:
        key_file = _key_file()
        if not key_file.exists():
            return None
        try:
            key = key_file.read_text(encoding="utf-8").strip()
        except OSError as e:
            logger.warning("Failed to load stored API key: %s", e)
            return None
        return key or None

    @staticmethod
    def rotate_key() -> str:
        return AuthKeyManager.generate_key()

    @staticmethod
    def validate_key(provided: str, stored: str) -> bool:
        return secrets.compare_digest(provided, stored)

    @staticmethod
    def has_stored_key() -> bool:
        return _key_file().exists()
