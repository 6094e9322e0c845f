"""Tests for yadu.config and yadu.scaffold."""

import json
import shutil

import pytest

from yadu.config import Settings, settings_path
from yadu.context import Context
from yadu.errors import ContextError, SettingsError
from yadu.introspect import BashIntrospector
from yadu.scaffold import create_unit, render_unit

needs_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available")


class TestSettings:
    """Tests for the per-user settings file."""

    def test_missing_file_gives_empty_settings(self, isolated_settings):
        settings = Settings.load()

        assert settings.context == ""
        assert settings.environment == ""
        assert settings.path == isolated_settings

    def test_path_follows_env_override(self, isolated_settings):
        assert settings_path() == isolated_settings

    def test_round_trip(self, isolated_settings, tmp_path):
        settings = Settings.load()
        settings.set_context(tmp_path)
        settings.set_environment("laptop")

        again = Settings.load()

        assert again.context == str(tmp_path.resolve())
        assert again.environment == "laptop"
        assert json.loads(isolated_settings.read_text()) == {
            "context": str(tmp_path.resolve()),
            "environment": "laptop",
        }

    def test_corrupt_file(self, isolated_settings):
        isolated_settings.parent.mkdir(parents=True)
        isolated_settings.write_text("{not json")

        with pytest.raises(SettingsError, match="failed to read settings"):
            Settings.load()

    def test_non_object_file(self, isolated_settings):
        isolated_settings.parent.mkdir(parents=True)
        isolated_settings.write_text("[1, 2]")

        with pytest.raises(SettingsError, match="JSON object"):
            Settings.load()

    def test_legacy_toml_is_read_when_json_missing(self, isolated_settings, tmp_path):
        isolated_settings.parent.mkdir(parents=True)
        legacy = isolated_settings.with_name("config.toml")
        legacy.write_text(f'context = "{tmp_path}"\nenvironment = "laptop"\n')

        settings = Settings.load()

        assert settings.context == str(tmp_path)
        assert settings.environment == "laptop"
        assert settings.path == isolated_settings

    def test_save_after_legacy_writes_json(self, isolated_settings):
        isolated_settings.parent.mkdir(parents=True)
        legacy = isolated_settings.with_name("config.toml")
        legacy.write_text('context = "/old"\nenvironment = "laptop"\n')

        Settings.load().set_environment("desktop")

        assert json.loads(isolated_settings.read_text()) == {"context": "/old", "environment": "desktop"}
        assert legacy.read_text() == 'context = "/old"\nenvironment = "laptop"\n'
        assert Settings.load().environment == "desktop"

    def test_json_wins_over_legacy_toml(self, isolated_settings):
        isolated_settings.parent.mkdir(parents=True)
        isolated_settings.with_name("config.toml").write_text('environment = "old"\n')
        isolated_settings.write_text('{"environment": "new"}')

        assert Settings.load().environment == "new"

    def test_corrupt_legacy_toml(self, isolated_settings):
        isolated_settings.parent.mkdir(parents=True)
        isolated_settings.with_name("config.toml").write_text("context = \n")

        with pytest.raises(SettingsError, match="failed to read settings"):
            Settings.load()


class TestScaffold:
    """Tests for unit templates."""

    def test_render_unit(self):
        text = render_unit("tmux", "Terminal multiplexer", ["git", "shell"])

        assert "echo 'Terminal multiplexer'" in text
        assert "echo 'git shell'" in text

    def test_create_unit(self, tree):
        path = create_unit(Context(tree.root), "tmux")

        assert path == tree.units_dir.resolve() / "tmux"
        assert path.stat().st_mode & 0o777 == 0o755
        assert "echo 'tmux unit'" in path.read_text()

    def test_create_unit_makes_units_dir(self, tmp_path):
        path = create_unit(Context(tmp_path / "fresh"), "git")

        assert path.exists()

    def test_refuses_existing_unit(self, tree):
        tree.add("git")

        with pytest.raises(ContextError, match="already exists"):
            create_unit(Context(tree.root), "git")

    @pytest.mark.parametrize("name", ["", "a/b", ".", "..", "two words", "x\ny"])
    def test_rejects_bad_names(self, tree, name):
        with pytest.raises(ContextError, match="invalid unit name"):
            create_unit(Context(tree.root), name)

    def test_rejects_bad_dependency_names(self, tree):
        with pytest.raises(ContextError, match="invalid unit name"):
            create_unit(Context(tree.root), "tmux", dependencies=["../../etc/x"])

        assert not (tree.units_dir / "tmux").exists()

    @needs_bash
    def test_shell_syntax_in_text_is_kept_literal(self, tree):
        """Description text comes back verbatim; nothing in it is expanded or run."""
        marker = tree.root / "expanded"
        description = f'costs $HOME "quoted" `touch {marker}` $(touch {marker})'
        path = create_unit(Context(tree.root), "x", description=description, dependencies=["git", "fonts"])
        introspector = BashIntrospector()

        assert introspector.description("x", path) == description
        assert introspector.dependencies("x", path) == ["git", "fonts"]
        assert not marker.exists()
