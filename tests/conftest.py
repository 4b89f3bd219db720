import json
import os

import pytest

from claude_switch.config import ConfigStore, StorePaths


@pytest.fixture(autouse=True)
def restore_environ():
    """Keep global environment stable across CLI invocations."""
    original = os.environ.copy()
    try:
        yield
    finally:
        os.environ.clear()
        os.environ.update(original)


@pytest.fixture()
def temp_home(tmp_path, monkeypatch):
    """Put HOME (and so ~/.claude and the preferences) in a temp location."""
    import platform
    from pathlib import Path

    home_dir = tmp_path / "home"
    home_dir.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("CLAUDE_CONFIG_DIR", raising=False)
    monkeypatch.delenv("Z_AI_AUTH_TOKEN", raising=False)
    monkeypatch.delenv("GLM_AUTH_TOKEN", raising=False)

    if platform.system() == "Windows":
        monkeypatch.setattr(Path, "home", lambda: home_dir)

    return home_dir


@pytest.fixture()
def claude_dir(temp_home):
    return temp_home / ".claude"


@pytest.fixture()
def store(claude_dir):
    return ConfigStore(StorePaths.for_directory(claude_dir))


@pytest.fixture()
def write_json():
    def _write(path, data):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write
