"""Named command dispatch.

Each command takes a JSON object of named parameters and produces either
``{"ok": true, ...}`` or ``{"ok": false, "error": {"code", "message"}}``.
Nothing raised below this layer escapes ``CommandHandler.handle``.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from droid_mcp.bridge.gesture import clamp_tap_duration
from droid_mcp.bridge.ports import AppLauncher
from droid_mcp.bridge.service import AccessibilityBridge, ServiceHandle
from droid_mcp.commands._helpers import (
    _as_int,
    _as_number,
    _as_string,
    _as_trimmed,
    _clamp,
    _coerce_bool,
    parse_params,
)
from droid_mcp.commands.errors import CommandError, ErrorCode
from droid_mcp.tree.config import DEFAULT_SNAPSHOT_MAX_NODES

logger = logging.getLogger(__name__)

DEFAULT_TAP_DURATION_MS = 60

DEFAULT_WAIT_TIMEOUT_MS = 3000
MIN_WAIT_TIMEOUT_MS = 100
MAX_WAIT_TIMEOUT_MS = 15000

DEFAULT_POLL_MS = 150
MIN_POLL_MS = 50
MAX_POLL_MS = 1000


@dataclass
class CommandResult:
    payload: dict[str, Any] | None = None
    error_code: ErrorCode | None = None
    error_message: str | None = None

    @classmethod
    def success(cls, **fields: Any) -> "CommandResult":
        return cls(payload={"ok": True, **fields})

    @classmethod
    def failure(cls, error: CommandError) -> "CommandResult":
        return cls(error_code=error.code, error_message=error.message)

    @property
    def ok(self) -> bool:
        return self.error_code is None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return dict(self.payload or {"ok": True})
        return {
            "ok": False,
            "error": {"code": self.error_code.value, "message": self.error_message},
        }


@dataclass
class _Command:
    handler: Callable[[dict[str, Any]], Awaitable[CommandResult]]
    failure_code: ErrorCode


class CommandHandler:
    """Translates named commands into bridge and launcher calls.

    Args:
        service: Handle to the accessibility bridge, refreshed before each
            command that needs it; those commands fail with
            ACCESSIBILITY_DISABLED while it stays empty.
        launcher: Starts activities on the device. ``app.launch`` does not
            depend on the accessibility bridge.
    """

    def __init__(self, service: ServiceHandle, launcher: AppLauncher | None = None):
        self.service = service
        self.launcher = launcher
        self._commands: dict[str, _Command] = {
            "app.launch": _Command(self.app_launch, ErrorCode.APP_LAUNCH_FAILED),
            "screen.tap": _Command(self.screen_tap, ErrorCode.TAP_FAILED),
            "text.input": _Command(self.text_input, ErrorCode.TEXT_INPUT_FAILED),
            "ime.paste": _Command(self.ime_paste, ErrorCode.IME_PASTE_FAILED),
            "ui.snapshot": _Command(self.ui_snapshot, ErrorCode.UI_NOT_FOUND),
            "ui.find": _Command(self.ui_find, ErrorCode.UI_NOT_FOUND),
            "ui.click": _Command(self.ui_click, ErrorCode.UI_CLICK_FAILED),
            "ui.waitFor": _Command(self.ui_wait_for, ErrorCode.UI_WAIT_TIMEOUT),
        }

    @property
    def command_names(self) -> list[str]:
        return list(self._commands)

    async def handle(self, command: str, params: dict | str | None = None) -> CommandResult:
        entry = self._commands.get((command or "").strip())
        if entry is None:
            return CommandResult.failure(
                CommandError(ErrorCode.INVALID_REQUEST, f"unknown command {command!r}")
            )
        payload = parse_params(params)
        try:
            return await entry.handler(payload)
        except CommandError as e:
            logger.debug("%s failed: %s", command, e.message)
            return CommandResult.failure(e)
        except Exception as e:
            logger.error("%s raised", command, exc_info=True)
            return CommandResult.failure(CommandError(entry.failure_code, str(e) or type(e).__name__))

    async def _require_bridge(self) -> AccessibilityBridge:
        bridge = await asyncio.to_thread(self.service.refresh)
        if bridge is None:
            raise CommandError(
                ErrorCode.ACCESSIBILITY_DISABLED,
                "accessibility bridge is not connected; check that a device is attached",
            )
        return bridge

    # -----------------------------------------------------------------------
    # Commands
    # -----------------------------------------------------------------------

    async def app_launch(self, params: dict[str, Any]) -> CommandResult:
        package_name = _as_trimmed(params.get("packageName"))
        activity = _as_trimmed(params.get("activity"))
        if package_name is None:
            raise CommandError(ErrorCode.INVALID_REQUEST, "packageName required")
        if self.launcher is None:
            raise CommandError(ErrorCode.APP_LAUNCH_FAILED, "no app launcher configured")

        try:
            component = activity
            if component is None:
                component = await asyncio.to_thread(
                    self.launcher.resolve_launch_component, package_name
                )
                if component is None:
                    raise CommandError(
                        ErrorCode.APP_NOT_FOUND, f"no launchable activity for {package_name}"
                    )
            await asyncio.to_thread(self.launcher.start_activity, package_name, component)
        except CommandError:
            raise
        except Exception as e:
            raise CommandError(ErrorCode.APP_LAUNCH_FAILED, str(e) or "failed to launch") from e

        fields: dict[str, Any] = {"packageName": package_name}
        if activity is not None:
            fields["activity"] = activity
        return CommandResult.success(**fields)

    async def screen_tap(self, params: dict[str, Any]) -> CommandResult:
        x = _as_number(params.get("x"))
        y = _as_number(params.get("y"))
        duration_ms = _as_int(params.get("durationMs"))
        if duration_ms is None:
            duration_ms = DEFAULT_TAP_DURATION_MS
        if x is None or y is None:
            raise CommandError(ErrorCode.INVALID_REQUEST, "x and y are required")
        duration_ms = clamp_tap_duration(duration_ms)

        bridge = await self._require_bridge()
        if not await bridge.tap(x, y, duration_ms):
            raise CommandError(ErrorCode.TAP_FAILED, "gesture dispatch failed")
        return CommandResult.success(x=x, y=y, durationMs=duration_ms)

    def _text_params(self, params: dict[str, Any]) -> tuple[str, str | None]:
        text = _as_string(params.get("text"))
        if not text:
            raise CommandError(ErrorCode.INVALID_REQUEST, "text required")
        return text, _as_trimmed(params.get("targetQuery"))

    @staticmethod
    def _text_result(text: str, target_query: str | None) -> CommandResult:
        fields: dict[str, Any] = {"textLength": len(text)}
        if target_query is not None:
            fields["targetQuery"] = target_query
        return CommandResult.success(**fields)

    async def text_input(self, params: dict[str, Any]) -> CommandResult:
        text, target_query = self._text_params(params)
        bridge = await self._require_bridge()
        if not await asyncio.to_thread(bridge.set_text, text, target_query):
            raise CommandError(
                ErrorCode.TEXT_INPUT_FAILED, "no focused editable field or action failed"
            )
        return self._text_result(text, target_query)

    async def ime_paste(self, params: dict[str, Any]) -> CommandResult:
        text, target_query = self._text_params(params)
        bridge = await self._require_bridge()
        if not await asyncio.to_thread(bridge.paste_text, text, target_query):
            raise CommandError(ErrorCode.IME_PASTE_FAILED, "failed to paste into focused field")
        return self._text_result(text, target_query)

    async def ui_snapshot(self, params: dict[str, Any]) -> CommandResult:
        max_nodes = _as_int(params.get("maxNodes"))
        if max_nodes is None:
            max_nodes = DEFAULT_SNAPSHOT_MAX_NODES
        max_nodes = max(1, max_nodes)

        bridge = await self._require_bridge()
        nodes = await asyncio.to_thread(bridge.snapshot, max_nodes)
        return CommandResult.success(count=len(nodes), nodes=[node.to_dict() for node in nodes])

    async def ui_find(self, params: dict[str, Any]) -> CommandResult:
        query = _as_trimmed(params.get("query"))
        if query is None:
            raise CommandError(ErrorCode.INVALID_REQUEST, "query required")

        bridge = await self._require_bridge()
        found = await asyncio.to_thread(bridge.find, query)
        if found is None:
            raise CommandError(ErrorCode.UI_NOT_FOUND, "no node matched query")

        dump = found.to_dict()
        for key in ("focusable", "focused", "enabled"):
            dump.pop(key, None)
        return CommandResult.success(query=query, **dump)

    async def ui_click(self, params: dict[str, Any]) -> CommandResult:
        path = _as_trimmed(params.get("path"))
        query = _as_trimmed(params.get("query"))
        if path is None and query is None:
            raise CommandError(ErrorCode.INVALID_REQUEST, "path or query required")

        bridge = await self._require_bridge()
        if not await asyncio.to_thread(bridge.click, path, query):
            raise CommandError(ErrorCode.UI_CLICK_FAILED, "target not found or not clickable")

        fields: dict[str, Any] = {}
        if path is not None:
            fields["path"] = path
        if query is not None:
            fields["query"] = query
        return CommandResult.success(**fields)

    async def ui_wait_for(self, params: dict[str, Any]) -> CommandResult:
        query = _as_trimmed(params.get("query"))
        timeout_ms = _as_int(params.get("timeoutMs"))
        poll_ms = _as_int(params.get("pollMs"))
        expect_gone = _coerce_bool(params.get("expectGone"), default=False)
        timeout_ms = (
            DEFAULT_WAIT_TIMEOUT_MS
            if timeout_ms is None
            else _clamp(timeout_ms, MIN_WAIT_TIMEOUT_MS, MAX_WAIT_TIMEOUT_MS)
        )
        poll_ms = DEFAULT_POLL_MS if poll_ms is None else _clamp(poll_ms, MIN_POLL_MS, MAX_POLL_MS)
        if query is None:
            raise CommandError(ErrorCode.INVALID_REQUEST, "query required")

        bridge = await self._require_bridge()
        start = time.monotonic()
        while (time.monotonic() - start) * 1000 <= timeout_ms:
            exists = await asyncio.to_thread(bridge.exists, query)
            if exists != expect_gone:
                return CommandResult.success(
                    query=query,
                    expectGone=expect_gone,
                    elapsedMs=int((time.monotonic() - start) * 1000),
                )
            await asyncio.sleep(poll_ms / 1000)

        raise CommandError(ErrorCode.UI_WAIT_TIMEOUT, "condition not reached within timeout")
