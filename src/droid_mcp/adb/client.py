"""Thin wrapper around the ``adb`` command-line tool."""

import logging
import shlex
import subprocess

from droid_mcp.a11y.hierarchy import extract_hierarchy

logger = logging.getLogger(__name__)

UI_DUMP_PATH = "/sdcard/window_dump.xml"

KEYCODE_DEL = 67
KEYCODE_MOVE_END = 123
KEYCODE_PASTE = 279


class AdbError(RuntimeError):
    pass


def adb_text_escape(text: str) -> str:
    """Escape text for ``input text``, which treats %s as a space."""
    escaped = []
    for ch in text:
        if ch == " ":
            escaped.append("%s")
        elif ch in "\\'\"&|<>;()$`*~?#":
            escaped.append("\\" + ch)
        else:
            escaped.append(ch)
    return "".join(escaped)


class AdbClient:
    def __init__(self, adb_path: str = "adb", device_id: str | None = None, timeout: float = 30):
        self.adb_path = adb_path
        self.device_id = device_id or None
        self.timeout = timeout

    def _base_cmd(self) -> list[str]:
        cmd = [self.adb_path]
        if self.device_id:
            cmd += ["-s", self.device_id]
        return cmd

    def run(self, args, timeout=None, check=True, text=True) -> subprocess.CompletedProcess:
        cmd = self._base_cmd() + list(args)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                timeout=timeout or self.timeout,
                text=text,
            )
        except FileNotFoundError as e:
            raise AdbError(f"adb executable not found: {self.adb_path}") from e
        except subprocess.TimeoutExpired as e:
            raise AdbError(f"adb timed out: {' '.join(cmd)}") from e
        if check and result.returncode != 0:
            stderr = result.stderr.strip() if text else result.stderr.decode("utf-8", "replace")
            raise AdbError(f"adb failed: {' '.join(cmd)}\n{stderr}")
        return result

    def shell(self, cmd, timeout=None, check=True) -> subprocess.CompletedProcess:
        if isinstance(cmd, str):
            args = ["shell", cmd]
        else:
            args = ["shell"] + list(cmd)
        return self.run(args, timeout=timeout, check=check)

    def exec_out(self, cmd, timeout=None) -> subprocess.CompletedProcess:
        if isinstance(cmd, str):
            args = ["exec-out", cmd]
        else:
            args = ["exec-out"] + list(cmd)
        return self.run(args, timeout=timeout, check=True, text=False)

    def list_devices(self) -> list[tuple[str, str]]:
        output = self.run(["devices"], timeout=10).stdout.splitlines()
        devices = []
        for line in output[1:]:
            parts = line.split()
            if len(parts) >= 2:
                devices.append((parts[0], parts[1]))
        return devices

    def devices(self) -> list[str]:
        return [device_id for device_id, status in self.list_devices() if status == "device"]

    def is_connected(self) -> bool:
        try:
            online = self.devices()
        except AdbError as e:
            logger.warning("Unable to list adb devices: %s", e)
            return False
        if self.device_id:
            return self.device_id in online
        return bool(online)

    def swipe(self, x1, y1, x2, y2, duration_ms=300) -> None:
        self.shell(
            ["input", "swipe", str(int(x1)), str(int(y1)), str(int(x2)), str(int(y2)), str(duration_ms)]
        )

    def tap(self, x, y) -> None:
        self.shell(["input", "tap", str(int(x)), str(int(y))])

    def keyevent(self, *keycodes) -> None:
        self.shell(["input", "keyevent"] + [str(code) for code in keycodes])

    def input_text(self, text: str) -> None:
        if not text:
            return
        self.shell(["input", "text", adb_text_escape(text)])

    def set_clipboard(self, text: str) -> None:
        # adb shell joins its args into one device command line
        self.shell(["cmd", "clipboard", "set", shlex.quote(text)])

    def start_activity(self, component: str) -> None:
        result = self.shell(["am", "start", "-n", component])
        output = (result.stdout or "") + (result.stderr or "")
        # am exits 0 even when the component is unknown
        if "Error" in output:
            raise AdbError(output.strip())

    def resolve_launch_activity(self, package_name: str) -> str | None:
        result = self.shell(
            ["cmd", "package", "resolve-activity", "--brief", "-c",
             "android.intent.category.LAUNCHER", package_name],
            check=False,
        )
        for line in reversed((result.stdout or "").splitlines()):
            line = line.strip()
            if "/" in line and not line.startswith("No activity"):
                return line
        return None

    def dump_ui(self) -> str:
        # Uncompressed: --compressed drops nodes, so paths would differ between dump modes
        try:
            result = self.exec_out(["uiautomator", "dump", "/dev/tty"])
            extracted = extract_hierarchy(result.stdout.decode("utf-8", errors="replace"))
            if extracted:
                return extracted
        except AdbError:
            logger.debug("Direct uiautomator dump failed, using file dump", exc_info=True)
        self.shell(["uiautomator", "dump", UI_DUMP_PATH])
        result = self.exec_out(["cat", UI_DUMP_PATH])
        extracted = extract_hierarchy(result.stdout.decode("utf-8", errors="replace"))
        if not extracted:
            raise AdbError("failed to extract UI hierarchy")
        return extracted
