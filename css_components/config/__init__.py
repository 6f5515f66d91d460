"""Load and validate the css-components build configuration.

The configuration file describes where stylesheet sources live, where built
artifacts are written (a flat ``build`` directory plus the nested prefix
directory consumed downstream), which files stylelint skips, how PostCSS is
configured, and how the dev server binds. Every key is optional; missing
values fall back to the layout of the component library repository.

Examples
--------
>>> from pathlib import Path
>>> from css_components.config import load_build_config
>>> config = load_build_config(Path("css-components.yaml"))  # doctest: +SKIP
>>> config.paths.main_stylesheet.name  # doctest: +SKIP
'onsen-css-components.css'
"""

from .loader import build_config_from_mapping, load_build_config
from .models import (
    BuildConfig,
    ConfigError,
    LintConfig,
    PathsConfig,
    PostcssConfig,
    ServerConfig,
)

__all__ = [
    "BuildConfig",
    "ConfigError",
    "LintConfig",
    "PathsConfig",
    "PostcssConfig",
    "ServerConfig",
    "build_config_from_mapping",
    "load_build_config",
]
