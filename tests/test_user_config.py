"""
Tests for hierarchical user configuration.
"""

import json

import pytest

from solgraph.colorscheme import DARK_COLOR_SCHEME, DEFAULT_COLOR_SCHEME
from solgraph.exceptions import ConfigError
from solgraph.user_config import UserConfig


@pytest.fixture
def dirs(tmp_path):
    home = tmp_path / "home"
    project = tmp_path / "project"
    home.mkdir()
    project.mkdir()
    return home, project


def _write_config(base, payload):
    path = base / ".solgraph" / "config.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload))


class TestUserConfig:
    """Load order and graph defaults"""

    def test_defaults_without_files(self, dirs):
        home, project = dirs
        defaults = UserConfig(project, home=home).graph_defaults()

        assert defaults["enable_modifier_edges"] is False
        assert defaults["resolve_library_dispatch"] is True
        assert defaults["expand_imports"] is False
        assert defaults["color_scheme"] is DEFAULT_COLOR_SCHEME

    def test_local_overrides_global(self, dirs):
        home, project = dirs
        _write_config(home, {"graph": {"enable_modifier_edges": True, "color_scheme": "dark"}})
        _write_config(project, {"graph": {"enable_modifier_edges": False}})

        config = UserConfig(project, home=home)

        assert config.get("graph.enable_modifier_edges") is False
        assert config.get("graph.color_scheme") == "dark"
        assert config.graph_defaults()["color_scheme"] is DARK_COLOR_SCHEME

    def test_invalid_json_falls_back(self, dirs):
        home, project = dirs
        _write_config(project, "{not json")

        config = UserConfig(project, home=home)

        assert config.get("graph.expand_imports") is False

    def test_unknown_color_scheme(self, dirs):
        home, project = dirs
        _write_config(project, {"graph": {"color_scheme": "neon"}})

        with pytest.raises(ConfigError):
            UserConfig(project, home=home).graph_defaults()

    def test_get_missing_key(self, dirs):
        home, project = dirs
        config = UserConfig(project, home=home)

        assert config.get("graph.nothing", "fallback") == "fallback"
        assert config.get("graph.color_scheme.deeper") is None
        assert "graph" in config.get_all()
