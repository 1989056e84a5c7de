import json
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from callgate.cli import main
from callgate.config import load_config as real_load_config
from callgate.handlers import Handler, get_registry


class Greeter(Handler):
    def hello(self, name):
        print(f"Hi {name}")
        return 42

    def site(self):
        return self.app_config.get("site_name")

    def fail(self):
        raise RuntimeError("boom")


def _json(result):
    """Parse the JSON line printed by --json (log lines may precede it)."""
    return json.loads(result.output.strip().splitlines()[-1])


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("callgate.utils.setup_logging"):
        yield


@pytest.fixture
def greeter():
    get_registry().register_class("Greeter", Greeter)
    get_registry().register_function("ping", lambda: "pong")


def test_invoke_prints_output_and_return(runner, greeter):
    result = runner.invoke(main, ["invoke", "Greeter", "hello", "World"])
    assert result.exit_code == 0
    assert "Hi World" in result.output
    assert "return: 42" in result.output


def test_invoke_passes_app_config(runner, greeter):
    result = runner.invoke(main, ["invoke", "Greeter", "site", "--json"])
    assert result.exit_code == 0
    assert _json(result) == {"ok": True, "echo": "", "return_value": "test-site"}


def test_invoke_rejected_exits_1(runner, greeter):
    result = runner.invoke(main, ["invoke", "Greeter", "__init__"])
    assert result.exit_code == 1
    assert "magic method" in result.output


def test_invoke_fault_exits_1(runner, greeter):
    result = runner.invoke(main, ["invoke", "Greeter", "fail", "--json"])
    assert result.exit_code == 1
    data = _json(result)
    assert data["ok"] is False
    assert data["error_kind"] == "runtime"


def test_call_function(runner, greeter):
    result = runner.invoke(main, ["call", "ping", "--json"])
    assert result.exit_code == 0
    assert _json(result)["return_value"] == "pong"


def test_call_unknown_function(runner, greeter):
    result = runner.invoke(main, ["call", "nope"])
    assert result.exit_code == 1
    assert "The function, nope, cannot be found." in result.output


def test_invoke_bad_module(runner):
    result = runner.invoke(main, ["invoke", "Greeter", "hello", "-m", "no_such_handlers_mod"])
    assert result.exit_code == 1
    assert "Could not import handler module" in result.output


def test_handlers_list(runner, greeter):
    result = runner.invoke(main, ["handlers", "list"])
    assert result.exit_code == 0
    assert "classes:\n  Greeter" in result.output
    assert "functions:\n  ping" in result.output


def test_handlers_list_empty(runner):
    result = runner.invoke(main, ["handlers", "list"])
    assert result.exit_code == 0
    assert "No handlers registered." in result.output


def test_init_command_creates_files(runner, tmp_path, monkeypatch):
    home = tmp_path / "custom_home"
    monkeypatch.setenv("CALLGATE_HOME", str(home))

    result = runner.invoke(main, ["init"])
    assert result.exit_code == 0
    assert "Initialized callgate config" in result.output

    assert (home / "config.yaml").exists()
    assert (home / ".env").exists()

    cfg = yaml.safe_load((home / "config.yaml").read_text())
    assert cfg["handler_modules"] == []


def test_init_does_not_overwrite_without_force(runner, tmp_path, monkeypatch):
    home = tmp_path / "custom_home"
    monkeypatch.setenv("CALLGATE_HOME", str(home))
    home.mkdir(parents=True)
    (home / "config.yaml").write_text("existing: true")

    result = runner.invoke(main, ["init"])
    assert result.exit_code == 1
    assert "Config already exists" in result.output
    assert (home / "config.yaml").read_text() == "existing: true"


def test_init_force_overwrites(runner, tmp_path, monkeypatch):
    home = tmp_path / "custom_home"
    monkeypatch.setenv("CALLGATE_HOME", str(home))
    home.mkdir(parents=True)
    (home / "config.yaml").write_text("existing: true")

    result = runner.invoke(main, ["init", "--force"])
    assert result.exit_code == 0
    assert "existing" not in yaml.safe_load((home / "config.yaml").read_text())


def test_invalid_config_is_reported(runner, greeter, tmp_path, monkeypatch):
    home = tmp_path / "custom_home"
    monkeypatch.setenv("CALLGATE_HOME", str(home))
    home.mkdir(parents=True)
    (home / "config.yaml").write_text("handler_modules: [unclosed\n")

    with patch("callgate.config.load_config", new=real_load_config):
        result = runner.invoke(main, ["call", "ping"])

    assert result.exit_code == 1
    assert "✗ Config not loaded: Invalid YAML syntax" in result.output


def test_invalid_config_values_are_reported(runner, greeter, tmp_path, monkeypatch):
    home = tmp_path / "custom_home"
    monkeypatch.setenv("CALLGATE_HOME", str(home))
    home.mkdir(parents=True)
    (home / "config.yaml").write_text("log_level: LOUD\n")

    with patch("callgate.config.load_config", new=real_load_config):
        result = runner.invoke(main, ["handlers", "list"])

    assert result.exit_code == 1
    assert "Invalid log_level" in result.output


def test_missing_config_uses_defaults(runner, greeter, tmp_path, monkeypatch):
    monkeypatch.setenv("CALLGATE_HOME", str(tmp_path / "nowhere"))

    with patch("callgate.config.load_config", new=real_load_config):
        result = runner.invoke(main, ["call", "ping", "--json"])

    assert result.exit_code == 0
    assert _json(result)["return_value"] == "pong"
