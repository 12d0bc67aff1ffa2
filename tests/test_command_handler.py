"""Tests for droid_mcp.commands -- command dispatch, validation and error mapping.

Commands run against a real AccessibilityBridge over fixture trees; the app
launcher is a MagicMock.
"""

from unittest.mock import MagicMock

import pytest

from droid_mcp.a11y.node import NodeAction
from droid_mcp.adb.client import AdbError
from droid_mcp.bridge.service import AccessibilityBridge, ServiceHandle
from droid_mcp.commands import CommandError, CommandHandler, CommandResult, ErrorCode
from droid_mcp.commands._helpers import _as_int, _as_number, _coerce_bool, parse_params
from tests.tree_helpers import FakeDispatcher, FakeSource, make_node, sample_tree


def _handler(*roots, launcher=None, connected=True, **dispatcher_kwargs):
    dispatcher = FakeDispatcher(**dispatcher_kwargs)
    service = ServiceHandle()
    if connected:
        service.connect(AccessibilityBridge(FakeSource(*roots), dispatcher))
    return CommandHandler(service, launcher=launcher), dispatcher


def _error(result: CommandResult):
    data = result.to_dict()
    assert data["ok"] is False
    return data["error"]["code"], data["error"]["message"]


# ---------------------------------------------------------------------------
# Parameter coercion
# ---------------------------------------------------------------------------


class TestParseParams:
    def test_dict_passthrough(self):
        assert parse_params({"x": 1}) == {"x": 1}

    def test_json_string(self):
        assert parse_params('{"x": 1, "y": "2"}') == {"x": 1, "y": "2"}

    @pytest.mark.parametrize("raw", [None, "", "   ", "not json", "[1, 2]", "42", 7])
    def test_non_objects_become_empty(self, raw):
        assert parse_params(raw) == {}


class TestCoercion:
    def test_number_from_string(self):
        assert _as_number("540") == 540
        assert _as_number(" 12.5 ") == 12.5

    def test_number_rejects_bool_and_junk(self):
        assert _as_number(True) is None
        assert _as_number("abc") is None
        assert _as_number("nan") is None
        assert _as_number(float("inf")) is None
        assert _as_number([1]) is None

    def test_int_truncates(self):
        assert _as_int("60.9") == 60

    @pytest.mark.parametrize(
        "value, expected",
        [(True, True), (False, False), ("true", True), ("FALSE", False), ("yes", False), (1, False), (None, False)],
    )
    def test_coerce_bool(self, value, expected):
        assert _coerce_bool(value) is expected

    def test_coerce_bool_default(self):
        assert _coerce_bool(None, default=True) is True


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_command_names(self):
        handler, _ = _handler()
        assert handler.command_names == [
            "app.launch",
            "screen.tap",
            "text.input",
            "ime.paste",
            "ui.snapshot",
            "ui.find",
            "ui.click",
            "ui.waitFor",
        ]

    async def test_unknown_command(self):
        handler, _ = _handler()
        code, message = _error(await handler.handle("screen.swipe", {}))
        assert code == "INVALID_REQUEST"
        assert "screen.swipe" in message

    async def test_json_string_params(self):
        handler, _ = _handler()
        result = await handler.handle("screen.tap", '{"x": 10, "y": 20}')
        assert result.to_dict() == {"ok": True, "x": 10, "y": 20, "durationMs": 60}

    async def test_unexpected_exception_maps_to_command_code(self):
        dispatcher_error = RuntimeError("node recycled")

        def _raise(node):
            raise dispatcher_error

        handler, _ = _handler(sample_tree(), results={NodeAction.CLICK: _raise})
        code, message = _error(await handler.handle("ui.click", {"path": "r/0/0"}))
        assert code == "UI_CLICK_FAILED"
        assert message == "UI_CLICK_FAILED: node recycled"

    async def test_disconnected_service(self):
        handler, _ = _handler(connected=False)
        for command, params in [
            ("screen.tap", {"x": 1, "y": 2}),
            ("text.input", {"text": "hi"}),
            ("ime.paste", {"text": "hi"}),
            ("ui.snapshot", {}),
            ("ui.find", {"query": "ok"}),
            ("ui.click", {"path": "r"}),
            ("ui.waitFor", {"query": "ok"}),
        ]:
            code, _ = _error(await handler.handle(command, params))
            assert code == "ACCESSIBILITY_DISABLED", command

    async def test_validation_precedes_service_check(self):
        handler, _ = _handler(connected=False)
        code, _ = _error(await handler.handle("text.input", {"text": ""}))
        assert code == "INVALID_REQUEST"


class TestCommandError:
    def test_message_prefixed_with_code(self):
        err = CommandError(ErrorCode.UI_NOT_FOUND, "no node matched query")
        assert err.message == "UI_NOT_FOUND: no node matched query"
        assert str(err) == err.message

    def test_failure_result(self):
        result = CommandResult.failure(CommandError(ErrorCode.TAP_FAILED, "x"))
        assert result.ok is False
        assert result.to_dict() == {"ok": False, "error": {"code": "TAP_FAILED", "message": "TAP_FAILED: x"}}


# ---------------------------------------------------------------------------
# app.launch
# ---------------------------------------------------------------------------


class TestAppLaunch:
    @pytest.fixture
    def launcher(self):
        launcher = MagicMock()
        launcher.resolve_launch_component.return_value = "com.example/.MainActivity"
        return launcher

    async def test_resolves_launcher_activity(self, launcher):
        handler, _ = _handler(launcher=launcher)
        result = await handler.handle("app.launch", {"packageName": " com.example "})
        assert result.to_dict() == {"ok": True, "packageName": "com.example"}
        launcher.resolve_launch_component.assert_called_once_with("com.example")
        launcher.start_activity.assert_called_once_with("com.example", "com.example/.MainActivity")

    async def test_explicit_activity(self, launcher):
        handler, _ = _handler(launcher=launcher)
        result = await handler.handle(
            "app.launch", {"packageName": "com.example", "activity": ".SettingsActivity"}
        )
        assert result.to_dict() == {
            "ok": True,
            "packageName": "com.example",
            "activity": ".SettingsActivity",
        }
        launcher.resolve_launch_component.assert_not_called()
        launcher.start_activity.assert_called_once_with("com.example", ".SettingsActivity")

    async def test_does_not_need_bridge(self, launcher):
        handler, _ = _handler(launcher=launcher, connected=False)
        assert (await handler.handle("app.launch", {"packageName": "com.example"})).ok

    async def test_missing_package(self, launcher):
        handler, _ = _handler(launcher=launcher)
        code, _ = _error(await handler.handle("app.launch", {"packageName": "  "}))
        assert code == "INVALID_REQUEST"
        launcher.start_activity.assert_not_called()

    async def test_not_found(self, launcher):
        launcher.resolve_launch_component.return_value = None
        handler, _ = _handler(launcher=launcher)
        code, message = _error(await handler.handle("app.launch", {"packageName": "com.missing"}))
        assert code == "APP_NOT_FOUND"
        assert "com.missing" in message

    async def test_launch_failure_carries_platform_message(self, launcher):
        launcher.start_activity.side_effect = AdbError("Activity class does not exist")
        handler, _ = _handler(launcher=launcher)
        code, message = _error(await handler.handle("app.launch", {"packageName": "com.example"}))
        assert code == "APP_LAUNCH_FAILED"
        assert message == "APP_LAUNCH_FAILED: Activity class does not exist"

    async def test_no_launcher(self):
        handler, _ = _handler()
        code, _ = _error(await handler.handle("app.launch", {"packageName": "com.example"}))
        assert code == "APP_LAUNCH_FAILED"


# ---------------------------------------------------------------------------
# screen.tap
# ---------------------------------------------------------------------------


class TestScreenTap:
    async def test_default_duration(self):
        handler, dispatcher = _handler()
        result = await handler.handle("screen.tap", {"x": 540, "y": 1800})
        assert result.to_dict() == {"ok": True, "x": 540, "y": 1800, "durationMs": 60}
        assert dispatcher.gestures[0].duration_ms == 60

    async def test_duration_clamped_and_echoed(self):
        handler, dispatcher = _handler()
        result = await handler.handle("screen.tap", {"x": 1, "y": 2, "durationMs": 5000})
        assert result.to_dict()["durationMs"] == 1000
        assert dispatcher.gestures[0].duration_ms == 1000

    async def test_string_coordinates(self):
        handler, _ = _handler()
        result = await handler.handle("screen.tap", {"x": "540", "y": "1800.5"})
        assert result.to_dict()["y"] == 1800.5

    @pytest.mark.parametrize("params", [{}, {"x": 1}, {"y": 2}, {"x": "left", "y": 2}, {"x": True, "y": 2}])
    async def test_missing_coordinates(self, params):
        handler, dispatcher = _handler()
        code, _ = _error(await handler.handle("screen.tap", params))
        assert code == "INVALID_REQUEST"
        assert dispatcher.gestures == []

    async def test_cancelled_gesture(self):
        handler, _ = _handler(gesture_mode="cancel")
        code, _ = _error(await handler.handle("screen.tap", {"x": 1, "y": 2}))
        assert code == "TAP_FAILED"

    async def test_rejected_gesture(self):
        handler, _ = _handler(gesture_mode="reject")
        code, _ = _error(await handler.handle("screen.tap", {"x": 1, "y": 2}))
        assert code == "TAP_FAILED"


# ---------------------------------------------------------------------------
# text.input / ime.paste
# ---------------------------------------------------------------------------


class TestTextInput:
    async def test_success(self):
        handler, dispatcher = _handler(sample_tree())
        result = await handler.handle("text.input", {"text": "hello"})
        assert result.to_dict() == {"ok": True, "textLength": 5}
        assert dispatcher.actions_of(NodeAction.SET_TEXT)

    async def test_echoes_target_query(self):
        handler, _ = _handler(sample_tree())
        result = await handler.handle("text.input", {"text": "Ada", "targetQuery": " name "})
        assert result.to_dict() == {"ok": True, "textLength": 3, "targetQuery": "name"}

    async def test_empty_text_makes_no_platform_call(self):
        handler, dispatcher = _handler(sample_tree())
        code, _ = _error(await handler.handle("text.input", {"text": ""}))
        assert code == "INVALID_REQUEST"
        assert dispatcher.actions == []

    async def test_whitespace_text_is_allowed(self):
        handler, _ = _handler(sample_tree())
        assert (await handler.handle("text.input", {"text": "  "})).to_dict()["textLength"] == 2

    async def test_no_editable_target(self):
        handler, _ = _handler(make_node(text="static"))
        code, _ = _error(await handler.handle("text.input", {"text": "hello"}))
        assert code == "TEXT_INPUT_FAILED"


class TestImePaste:
    async def test_success(self):
        handler, dispatcher = _handler(sample_tree())
        result = await handler.handle("ime.paste", {"text": "héllo wörld"})
        assert result.to_dict() == {"ok": True, "textLength": 11}
        assert dispatcher.clipboard_writes == ["héllo wörld"]

    async def test_missing_text(self):
        handler, dispatcher = _handler(sample_tree())
        code, _ = _error(await handler.handle("ime.paste", {}))
        assert code == "INVALID_REQUEST"
        assert dispatcher.clipboard_writes == []

    async def test_clipboard_failure(self):
        handler, _ = _handler(sample_tree(), clipboard=False)
        code, _ = _error(await handler.handle("ime.paste", {"text": "x"}))
        assert code == "IME_PASTE_FAILED"


# ---------------------------------------------------------------------------
# ui.snapshot / ui.find
# ---------------------------------------------------------------------------


class TestUiSnapshot:
    async def test_default(self):
        handler, _ = _handler(sample_tree())
        data = (await handler.handle("ui.snapshot", {})).to_dict()
        assert data["ok"] is True
        assert data["count"] == 7
        assert [n["path"] for n in data["nodes"][:3]] == ["r", "r/0", "r/1"]

    async def test_max_nodes(self):
        handler, _ = _handler(sample_tree())
        data = (await handler.handle("ui.snapshot", {"maxNodes": 2})).to_dict()
        assert data["count"] == 2
        assert len(data["nodes"]) == 2

    async def test_max_nodes_minimum_one(self):
        handler, _ = _handler(sample_tree())
        data = (await handler.handle("ui.snapshot", {"maxNodes": -4})).to_dict()
        assert data["count"] == 1

    async def test_unavailable_root_is_empty(self):
        handler, _ = _handler()
        assert (await handler.handle("ui.snapshot", {})).to_dict() == {"ok": True, "count": 0, "nodes": []}


class TestUiFind:
    async def test_text_beats_description(self):
        root = make_node(children=[make_node(desc="search button"), make_node(text="search")])
        handler, _ = _handler(root)
        data = (await handler.handle("ui.find", {"query": "search"})).to_dict()
        assert data == {
            "ok": True,
            "query": "search",
            "path": "r/1",
            "text": "search",
            "bounds": "[0,0][100,50]",
            "centerX": 50,
            "centerY": 25,
            "clickable": False,
            "editable": False,
        }

    async def test_not_found(self):
        handler, _ = _handler(sample_tree())
        code, _ = _error(await handler.handle("ui.find", {"query": "checkout"}))
        assert code == "UI_NOT_FOUND"

    async def test_blank_query(self):
        handler, _ = _handler(sample_tree())
        code, _ = _error(await handler.handle("ui.find", {"query": "   "}))
        assert code == "INVALID_REQUEST"


# ---------------------------------------------------------------------------
# ui.click
# ---------------------------------------------------------------------------


class TestUiClick:
    async def test_neither_path_nor_query(self):
        handler, dispatcher = _handler(sample_tree())
        code, _ = _error(await handler.handle("ui.click", {}))
        assert code == "INVALID_REQUEST"
        assert dispatcher.actions == []

    async def test_by_path(self):
        handler, _ = _handler(sample_tree())
        data = (await handler.handle("ui.click", {"path": "r/0/0"})).to_dict()
        assert data == {"ok": True, "path": "r/0/0"}

    async def test_by_query(self):
        handler, _ = _handler(sample_tree())
        data = (await handler.handle("ui.click", {"query": "search"})).to_dict()
        assert data == {"ok": True, "query": "search"}

    async def test_not_clickable(self):
        handler, _ = _handler(sample_tree())
        code, _ = _error(await handler.handle("ui.click", {"query": "name"}))
        assert code == "UI_CLICK_FAILED"


# ---------------------------------------------------------------------------
# ui.waitFor
# ---------------------------------------------------------------------------


class TestUiWaitFor:
    async def test_already_present(self):
        handler, _ = _handler(sample_tree())
        data = (await handler.handle("ui.waitFor", {"query": "name", "timeoutMs": 3000})).to_dict()
        assert data["ok"] is True
        assert data["query"] == "name"
        assert data["expectGone"] is False
        assert 0 <= data["elapsedMs"] < 3000

    async def test_appears_after_polls(self):
        empty = make_node()
        loaded = make_node(children=[make_node(text="Welcome")])
        handler, _ = _handler(empty, empty, loaded)
        data = (
            await handler.handle("ui.waitFor", {"query": "welcome", "pollMs": 50, "timeoutMs": 5000})
        ).to_dict()
        assert data["ok"] is True
        assert data["elapsedMs"] >= 50

    async def test_expect_gone(self):
        spinner = make_node(children=[make_node(desc="Loading")])
        done = make_node(children=[make_node(text="Done")])
        handler, _ = _handler(spinner, done)
        data = (
            await handler.handle(
                "ui.waitFor", {"query": "loading", "expectGone": "true", "pollMs": 50}
            )
        ).to_dict()
        assert data["ok"] is True
        assert data["expectGone"] is True

    async def test_expect_gone_when_root_unavailable(self):
        handler, _ = _handler()
        data = (await handler.handle("ui.waitFor", {"query": "x", "expectGone": True})).to_dict()
        assert data["ok"] is True

    async def test_timeout(self):
        handler, _ = _handler(sample_tree())
        code, message = _error(
            await handler.handle("ui.waitFor", {"query": "checkout", "timeoutMs": 1, "pollMs": 1})
        )
        assert code == "UI_WAIT_TIMEOUT"
        assert message.startswith("UI_WAIT_TIMEOUT: ")

    async def test_missing_query(self):
        handler, _ = _handler(sample_tree())
        code, _ = _error(await handler.handle("ui.waitFor", {"timeoutMs": 100}))
        assert code == "INVALID_REQUEST"
