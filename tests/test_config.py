# tests/test_config.py
import os
import pytest

from browserplex.config import get_env_config, get_state_dir
from browserplex.context import build_app_context


_VARS = (
    "BROWSERPLEX_STATE_DIR",
    "BROWSERPLEX_DEFAULT_BROWSER",
    "BROWSERPLEX_HEADLESS",
    "BROWSERPLEX_LOCK_TIMEOUT_SECS",
    "BROWSERPLEX_DEFAULT_TIMEOUT_MS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in _VARS:
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    cfg = get_env_config()
    assert cfg["state_dir"] == os.path.join(os.path.expanduser("~"), ".browserplex")
    assert cfg["default_browser"] == "chromium"
    assert cfg["headless"] is None
    assert cfg["lock_timeout_secs"] == 300
    assert cfg["default_timeout_ms"] == 5000


def test_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("BROWSERPLEX_STATE_DIR", str(tmp_path))
    monkeypatch.setenv("BROWSERPLEX_DEFAULT_BROWSER", "Firefox")
    monkeypatch.setenv("BROWSERPLEX_HEADLESS", "no")
    monkeypatch.setenv("BROWSERPLEX_LOCK_TIMEOUT_SECS", "60")
    monkeypatch.setenv("BROWSERPLEX_DEFAULT_TIMEOUT_MS", "1500")

    cfg = get_env_config()
    assert cfg["state_dir"] == str(tmp_path)
    assert cfg["default_browser"] == "firefox"
    assert cfg["headless"] is False
    assert cfg["lock_timeout_secs"] == 60
    assert cfg["default_timeout_ms"] == 1500
    assert get_state_dir() == str(tmp_path)
    assert get_state_dir({"state_dir": "/elsewhere"}) == "/elsewhere"


@pytest.mark.parametrize("var,value", [
    ("BROWSERPLEX_DEFAULT_BROWSER", "netscape"),
    ("BROWSERPLEX_HEADLESS", "maybe"),
    ("BROWSERPLEX_LOCK_TIMEOUT_SECS", "-5"),
    ("BROWSERPLEX_DEFAULT_TIMEOUT_MS", "fast"),
])
def test_invalid_values_name_the_variable(monkeypatch, var, value):
    monkeypatch.setenv(var, value)
    with pytest.raises(EnvironmentError) as excinfo:
        get_env_config()
    assert var in str(excinfo.value)


def test_app_context_uses_resolved_state_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("BROWSERPLEX_STATE_DIR", str(tmp_path / "from-env"))
    app = build_app_context({"state_dir": None, "headless": None, "lock_timeout_secs": 300})
    assert app.storage.root == tmp_path / "from-env" / "sessions"

    app = build_app_context({"state_dir": str(tmp_path), "headless": None, "lock_timeout_secs": 60})
    assert app.storage.root == tmp_path / "sessions"
    assert app.storage.lock_timeout_secs == 60
