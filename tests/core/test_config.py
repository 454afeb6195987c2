"""Tests for irqscan.core.config module."""

from pathlib import Path

import pytest

from irqscan.core.config import (
    ConfigError,
    Settings,
    get_config_value,
    load_config_file,
    load_settings,
    user_config_path,
)


class TestLoadConfigFile:
    """Tests for load_config_file."""

    def test_returns_empty_dict_if_file_missing(self, tmp_path):
        """Returns empty dict when file doesn't exist."""
        assert load_config_file(tmp_path / "nonexistent.yaml") == {}

    def test_loads_yaml_file(self, tmp_path):
        """Loads and parses YAML config file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("root: /srv/snapshot\nworkers: 4\n")

        assert load_config_file(config_file) == {"root": "/srv/snapshot", "workers": 4}

    def test_returns_empty_dict_on_invalid_yaml(self, tmp_path):
        """Returns empty dict when YAML is invalid."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("invalid: yaml: content: [")

        assert load_config_file(config_file) == {}

    def test_returns_empty_dict_for_empty_file(self, tmp_path):
        """Returns empty dict for empty file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        assert load_config_file(config_file) == {}

    def test_returns_empty_dict_for_non_mapping(self, tmp_path):
        """A top-level list is not a config."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- workers\n- 4\n")

        assert load_config_file(config_file) == {}


class TestGetConfigValue:
    """Tests for get_config_value."""

    def test_returns_none_when_no_config(self, tmp_path, monkeypatch):
        """Returns None when no config files exist."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        assert get_config_value("workers") is None

    def test_project_config_takes_precedence(self, tmp_path, monkeypatch):
        """Project config overrides user config."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        user_config_dir = tmp_path / ".config" / "irqscan"
        user_config_dir.mkdir(parents=True)
        (user_config_dir / "config.yaml").write_text("workers: 2\nqueue_size: 3\n")
        (tmp_path / ".irqscan.yaml").write_text("workers: 8\n")

        assert get_config_value("workers") == 8
        assert get_config_value("queue_size") == 3

    def test_falls_back_to_user_config(self, tmp_path, monkeypatch):
        """Uses user config when no project config exists."""
        project = tmp_path / "project"
        project.mkdir()
        monkeypatch.chdir(project)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        user_config_dir = tmp_path / ".config" / "irqscan"
        user_config_dir.mkdir(parents=True)
        (user_config_dir / "config.yaml").write_text("root: /mnt/host\n")

        assert get_config_value("root") == "/mnt/host"

    def test_explicit_paths(self, tmp_path):
        """Explicit paths are searched in order."""
        first = tmp_path / "first.yaml"
        second = tmp_path / "second.yaml"
        first.write_text("workers: 1\n")
        second.write_text("workers: 2\nroot: /x\n")

        assert get_config_value("workers", [first, second]) == 1
        assert get_config_value("root", [first, second]) == "/x"


class TestUserConfigPath:
    """Tests for user_config_path."""

    def test_below_home(self, tmp_path, monkeypatch):
        """The user config lives in ~/.config/irqscan."""
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        assert user_config_path() == tmp_path / ".config" / "irqscan" / "config.yaml"


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults(self, tmp_path):
        """Without config or overrides the defaults apply."""
        settings = load_settings(paths=[tmp_path / "missing.yaml"])

        assert settings == Settings(root="", workers=16, queue_size=16, log_dir=None)

    def test_reads_config_file(self, tmp_path):
        """Values come from the config file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "root: /srv/snapshot\nworkers: 4\nqueue_size: 2\nlog_dir: /var/tmp/irq\n"
        )

        settings = load_settings(paths=[config_file])

        assert settings.root == "/srv/snapshot"
        assert settings.workers == 4
        assert settings.queue_size == 2
        assert settings.log_dir == Path("/var/tmp/irq")

    def test_overrides_win(self, tmp_path):
        """Explicit values beat config file values."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("root: /srv/snapshot\nworkers: 4\n")

        settings = load_settings(paths=[config_file], root="/other", workers=1)

        assert settings.root == "/other"
        assert settings.workers == 1

    def test_none_overrides_are_ignored(self, tmp_path):
        """None means not given on the command line."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("workers: 4\n")

        settings = load_settings(paths=[config_file], workers=None, root=None)

        assert settings.workers == 4
        assert settings.root == ""

    def test_expands_log_dir(self, tmp_path, monkeypatch):
        """A leading ~ in log_dir is expanded."""
        monkeypatch.setenv("HOME", str(tmp_path))

        settings = load_settings(paths=[], log_dir="~/logs")

        assert settings.log_dir == tmp_path / "logs"

    @pytest.mark.parametrize("content,match", [
        ("workers: 0\n", "workers must be at least 1"),
        ("queue_size: -2\n", "queue_size must be at least 1"),
        ("workers: four\n", "workers must be an integer"),
        ("workers: true\n", "workers must be an integer"),
        ("root: 42\n", "root must be a string"),
        ("log_dir: [a, b]\n", "log_dir must be a path"),
    ])
    def test_rejects_invalid_values(self, tmp_path, content, match):
        """Invalid config values raise ConfigError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(content)

        with pytest.raises(ConfigError, match=match):
            load_settings(paths=[config_file])

    def test_rejects_invalid_override(self):
        """Invalid explicit values raise ConfigError."""
        with pytest.raises(ConfigError):
            load_settings(paths=[], queue_size=0)
