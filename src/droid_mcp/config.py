"""Runtime settings read from the environment (and ``.env`` via python-dotenv)."""

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_ADB_TIMEOUT = 30.0


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


@dataclass
class Settings:
    adb_path: str = field(default="adb")
    device_id: str = field(default="")
    adb_timeout: float = field(default=DEFAULT_ADB_TIMEOUT)
    api_key: str = field(default="")

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            adb_path=os.getenv("ADB_PATH", "").strip() or "adb",
            device_id=os.getenv("ANDROID_SERIAL", "").strip(),
            adb_timeout=_env_float("DROID_MCP_ADB_TIMEOUT", DEFAULT_ADB_TIMEOUT),
            api_key=os.getenv("DROID_MCP_API_KEY", "").strip(),
        )
