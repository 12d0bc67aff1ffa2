from enum import Enum


class ErrorCode(Enum):
    INVALID_REQUEST = "INVALID_REQUEST"
    ACCESSIBILITY_DISABLED = "ACCESSIBILITY_DISABLED"
    APP_NOT_FOUND = "APP_NOT_FOUND"
    APP_LAUNCH_FAILED = "APP_LAUNCH_FAILED"
    TAP_FAILED = "TAP_FAILED"
    TEXT_INPUT_FAILED = "TEXT_INPUT_FAILED"
    IME_PASTE_FAILED = "IME_PASTE_FAILED"
    UI_CLICK_FAILED = "UI_CLICK_FAILED"
    UI_NOT_FOUND = "UI_NOT_FOUND"
    UI_WAIT_TIMEOUT = "UI_WAIT_TIMEOUT"

    def __str__(self):
        return self.value


class CommandError(Exception):
    """A command failed with a taxonomy code; never escapes the handler."""

    def __init__(self, code: ErrorCode, detail: str):
        self.code = code
        self.detail = detail
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return f"{self.code.value}: {self.detail}"
