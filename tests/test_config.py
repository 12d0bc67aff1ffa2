"""Tests for droid_mcp.config.Settings."""

import pytest

from droid_mcp.config import DEFAULT_ADB_TIMEOUT, Settings

ENV_VARS = ("ADB_PATH", "ANDROID_SERIAL", "DROID_MCP_ADB_TIMEOUT", "DROID_MCP_API_KEY")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSettingsFromEnv:
    def test_defaults(self):
        settings = Settings.from_env()
        assert settings == Settings(
            adb_path="adb", device_id="", adb_timeout=DEFAULT_ADB_TIMEOUT, api_key=""
        )

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ADB_PATH", "/opt/platform-tools/adb")
        monkeypatch.setenv("ANDROID_SERIAL", " emulator-5554 ")
        monkeypatch.setenv("DROID_MCP_ADB_TIMEOUT", "12.5")
        monkeypatch.setenv("DROID_MCP_API_KEY", "secret")
        settings = Settings.from_env()
        assert settings.adb_path == "/opt/platform-tools/adb"
        assert settings.device_id == "emulator-5554"
        assert settings.adb_timeout == 12.5
        assert settings.api_key == "secret"

    def test_invalid_timeout_falls_back(self, monkeypatch):
        monkeypatch.setenv("DROID_MCP_ADB_TIMEOUT", "soon")
        assert Settings.from_env().adb_timeout == DEFAULT_ADB_TIMEOUT

    def test_blank_adb_path(self, monkeypatch):
        monkeypatch.setenv("ADB_PATH", "   ")
        assert Settings.from_env().adb_path == "adb"
