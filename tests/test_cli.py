"""CLI tests for usekit."""

import json

import pytest
from typer.testing import CliRunner

from usekit.main import app
from usekit.utils.logging_utils import setup_cli_logging

runner = CliRunner()


@pytest.fixture
def init_path(write_init):
    return write_init(
        """
        capabilities:
          - usekit-no-such-tool-xyz
        components:
          - name: editor
            settings: {indent: 4}
            bind:
              - {key: "ctrl+x ctrl+s", handler: save-buffer}
          - name: org
            defer: true
            triggers: [org-mode]
            bind:
              - {key: "ctrl+c ctrl+c", handler: org-ctrl-c-ctrl-c, scope: org-mode}
          - name: broken
            init:
              - os.path:no_such_function
          - name: media
            when: {enabled: false}
        bindings:
          - {key: "ctrl+x ctrl+s", handler: user-save}
        """
    )


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Usage:" in result.stdout

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "usekit version" in result.stdout

    def test_verbose_and_quiet_exclusive(self):
        result = runner.invoke(app, ["--verbose", "--quiet", "version"])
        assert result.exit_code == 1

    def test_invalid_command(self):
        result = runner.invoke(app, ["nonexistent-command"])
        assert result.exit_code != 0

    def test_log_dir_records_activations(self, init_path, tmp_path):
        log_dir = tmp_path / "logs"
        result = runner.invoke(
            app, ["--quiet", "--log-dir", str(log_dir), "activate", str(init_path)]
        )
        # Detach the file handler again
        setup_cli_logging()

        assert result.exit_code == 0
        text = (log_dir / "usekit.log").read_text()
        assert "Activated component 'editor'" in text
        assert "- INFO -" in text


class TestCheck:
    """Capability check never fails on missing tools."""

    def test_check_json_missing_tool(self, init_path):
        result = runner.invoke(app, ["--quiet", "check", str(init_path), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["ok"] is False
        assert data["missing"] == [["usekit-no-such-tool-xyz"]]

    def test_check_table(self, init_path):
        result = runner.invoke(app, ["check", str(init_path)])
        assert result.exit_code == 0
        assert "usekit-no-such-tool-xyz" in result.stdout

    def test_check_missing_init_file(self, tmp_path):
        result = runner.invoke(app, ["check", str(tmp_path / "absent.yaml")])
        assert result.exit_code == 1


class TestActivate:
    """Activation from an init file."""

    def test_activate_json(self, init_path):
        result = runner.invoke(app, ["--quiet", "activate", str(init_path), "--json"])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        statuses = {c["name"]: c["status"] for c in data["components"]}
        # The broken import path is caught while loading, not activating
        assert statuses == {"editor": "activated", "org": "deferred", "media": "skipped"}
        assert data["pending"] == ["org"]
        assert data["settings"] == {"editor": {"indent": 4}}
        assert len(data["load_errors"]) == 1

    def test_activate_fire_event(self, init_path):
        result = runner.invoke(
            app, ["--quiet", "activate", str(init_path), "--fire", "org-mode", "--json"]
        )
        data = json.loads(result.stdout)
        org = next(c for c in data["components"] if c["name"] == "org")
        assert org["status"] == "activated"
        assert org["trigger"] == "org-mode"
        assert data["pending"] == []

    def test_activate_demand(self, init_path):
        result = runner.invoke(
            app, ["--quiet", "activate", str(init_path), "--demand", "org", "--json"]
        )
        data = json.loads(result.stdout)
        assert data["pending"] == []

    def test_strict_exit_code(self, init_path):
        result = runner.invoke(app, ["activate", str(init_path), "--strict"])
        assert result.exit_code == 1

    def test_activate_table(self, init_path):
        result = runner.invoke(app, ["activate", str(init_path)])
        assert result.exit_code == 0
        assert "editor" in result.stdout
        assert "deferred" in result.stdout


class TestKeys:
    """Key binding inspection."""

    def test_user_binding_wins(self, init_path):
        result = runner.invoke(app, ["keys", "-c", str(init_path), "resolve", "ctrl+x ctrl+s"])
        assert result.exit_code == 0
        assert "user-save" in result.stdout

    def test_resolve_from_context_falls_back_to_global(self, init_path):
        result = runner.invoke(
            app, ["keys", "-c", str(init_path), "resolve", "ctrl+x ctrl+s", "--scope", "org-mode"]
        )
        assert "user-save" in result.stdout

    def test_unbound_chord(self, init_path):
        result = runner.invoke(app, ["keys", "-c", str(init_path), "resolve", "ctrl+q"])
        assert result.exit_code == 1

    def test_keys_json_with_fire(self, init_path):
        result = runner.invoke(
            app, ["--quiet", "keys", "-c", str(init_path), "--fire", "org-mode", "--json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["bindings"]["org-mode"] == {"ctrl+c ctrl+c": "org-ctrl-c-ctrl-c"}
        assert data["overrides"][0]["source"] == "user"

    def test_keys_summary(self, init_path):
        result = runner.invoke(app, ["keys", "-c", str(init_path)])
        assert result.exit_code == 0
        assert "Key Binding Summary" in result.stdout


class TestInit:
    """Example init file creation."""

    def test_init_creates_file(self, tmp_path, monkeypatch):
        path = tmp_path / "init.yaml"
        monkeypatch.setenv("USEKIT_INIT", str(path))
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        assert path.exists()

        result = runner.invoke(app, ["init"])
        assert "already exists" in result.stdout
