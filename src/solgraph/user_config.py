"""
solgraph User Configuration

Hierarchical config system with global defaults + local overrides:
- Global: ~/.solgraph/config.json (cross-project settings)
- Local: .solgraph/config.json (project-specific overrides)

Config structure:
{
  "graph": {
    "enable_modifier_edges": false,     // Draw function -> modifier edges
    "resolve_library_dispatch": true,   // Attribute using-for calls to libraries
    "expand_imports": false,            // Follow import directives
    "color_scheme": "default"           // "default" or "dark"
  }
}
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from solgraph.colorscheme import COLOR_SCHEMES
from solgraph.exceptions import ConfigError
from solgraph.logging_config import logger


# Default configuration
DEFAULT_CONFIG = {
    "graph": {
        "enable_modifier_edges": False,
        "resolve_library_dispatch": True,
        "expand_imports": False,
        "color_scheme": "default",
    }
}


class UserConfig:
    """
    Manages hierarchical user configuration.

    Load order (with override):
    1. Default config (hardcoded)
    2. Global config (~/.solgraph/config.json)
    3. Local config (.solgraph/config.json)
    """

    def __init__(self, project_root: Optional[Path] = None, home: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            project_root: Project root directory (defaults to CWD)
            home: Home directory holding the global config (defaults to the user's home)
        """
        self.project_root = Path(project_root or Path.cwd())
        self.global_config_path = Path(home or Path.home()) / ".solgraph" / "config.json"
        self.local_config_path = self.project_root / ".solgraph" / "config.json"

        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration with hierarchical override.

        Returns:
            Merged configuration dictionary
        """
        config = self._deep_merge({}, DEFAULT_CONFIG)

        for scope, path in (("global", self.global_config_path), ("local", self.local_config_path)):
            if not path.exists():
                continue
            try:
                with open(path, "r", encoding="utf-8") as f:
                    config = self._deep_merge(config, json.load(f))
                logger.debug(f"Loaded {scope} config from {path}")
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to load {scope} config: {e}")

        return config

    def _deep_merge(self, base: Dict, override: Dict) -> Dict:
        """
        Deep merge two dictionaries, with override taking precedence.
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a config value by dot-separated key.

        Args:
            key: Dot-separated key (e.g., "graph.color_scheme")
            default: Default value if key not found

        Returns:
            Config value
        """
        value = self._config

        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def graph_defaults(self) -> Dict[str, Any]:
        """
        Defaults for call graph runs from the "graph" section.

        Returns:
            Keyword arguments for GraphOptions

        Raises:
            ConfigError: If the configured color scheme is unknown
        """
        section = self.get("graph", {})
        scheme_name = section.get("color_scheme", "default")
        if scheme_name not in COLOR_SCHEMES:
            raise ConfigError(
                f"Unknown color scheme '{scheme_name}' (expected one of: {', '.join(COLOR_SCHEMES)})"
            )

        return {
            "enable_modifier_edges": bool(section.get("enable_modifier_edges", False)),
            "resolve_library_dispatch": bool(section.get("resolve_library_dispatch", True)),
            "expand_imports": bool(section.get("expand_imports", False)),
            "color_scheme": COLOR_SCHEMES[scheme_name],
        }

    def get_all(self) -> Dict[str, Any]:
        """Get the entire merged configuration."""
        return self._config.copy()
