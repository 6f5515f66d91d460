"""Load the build configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from css_components._constants import DEFAULT_STYLESHEET_NAME

from .models import (
    BuildConfig,
    ConfigError,
    LintConfig,
    PathsConfig,
    PostcssConfig,
    ServerConfig,
)


def load_build_config(path: Path) -> BuildConfig:
    """Load the YAML file describing the component library layout.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration (for example,
        ``css-components.yaml``). Relative paths inside the file resolve
        against the directory containing it.

    Returns
    -------
    BuildConfig
        Parsed configuration with defaults applied for every missing key.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    ConfigError
        If a section or value has the wrong shape.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from css_components.config import load_build_config
    >>> config = load_build_config(Path("css-components.yaml"))  # doctest: +SKIP
    >>> config.server.port  # doctest: +SKIP
    4321
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise ConfigError(msg)
    return build_config_from_mapping(loaded, root=path.resolve().parent)


def build_config_from_mapping(
    raw: typ.Mapping[str, typ.Any], *, root: Path
) -> BuildConfig:
    """Build a :class:`BuildConfig` from an already parsed mapping."""
    paths = _build_paths_config(_section(raw, "paths"), root)
    lint_raw = _section(raw, "stylelint")
    postcss_raw = _section(raw, "postcss")
    server_raw = _section(raw, "server")

    lint = LintConfig()
    if "exclude" in lint_raw:
        lint.exclude = _string_list(lint_raw["exclude"], "stylelint.exclude")
    if "formatter" in lint_raw:
        lint.formatter = str(lint_raw["formatter"])

    postcss = PostcssConfig(base64_root=paths.source_dir / "components")
    if "browsers" in postcss_raw:
        postcss.browsers = _string_list(postcss_raw["browsers"], "postcss.browsers")
    if "base64_extensions" in postcss_raw:
        postcss.base64_extensions = _string_list(
            postcss_raw["base64_extensions"], "postcss.base64_extensions"
        )
    if postcss_raw.get("base64_root"):
        postcss.base64_root = _resolve(root, postcss_raw["base64_root"])

    server = ServerConfig()
    if "host" in server_raw:
        server.host = str(server_raw["host"])
    if "port" in server_raw:
        server.port = _port(server_raw["port"], "server.port")
    if "live_port" in server_raw:
        server.live_port = _port(server_raw["live_port"], "server.live_port")

    return BuildConfig(paths=paths, lint=lint, postcss=postcss, server=server)


def _build_paths_config(raw: typ.Mapping[str, typ.Any], root: Path) -> PathsConfig:
    source_dir = _resolve(root, raw.get("source_dir", "src"))
    build_dir = _resolve(root, raw.get("build_dir", "build"))
    previewer_dir = _resolve(root, raw.get("previewer_dir", "previewer-src"))
    template = raw.get("template")
    stylesheet_name = raw.get("stylesheet_name") or DEFAULT_STYLESHEET_NAME
    return PathsConfig(
        root=root,
        source_dir=source_dir,
        build_dir=build_dir,
        prefix_dir=_resolve(root, raw.get("prefix_dir", "../build/css")),
        previewer_dir=previewer_dir,
        patterns=_resolve(root, raw.get("patterns", "patterns.yaml")),
        app_entry=_resolve(root, raw.get("app_entry", previewer_dir / "app.js")),
        app_bundle=_resolve(root, raw.get("app_bundle", build_dir / "app.gen.js")),
        template=_resolve(root, template) if template else None,
        stylesheet_name=str(stylesheet_name),
    )


def _section(raw: typ.Mapping[str, typ.Any], key: str) -> typ.Mapping[str, typ.Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        msg = f"Section '{key}' must be a mapping."
        raise ConfigError(msg)
    return value


def _resolve(root: Path, value: str | Path) -> Path:
    candidate = Path(value)
    if candidate.is_absolute():
        return candidate
    return (root / candidate).resolve()


def _string_list(value: object, key: str) -> list[str]:
    match value:
        case str():
            return [value]
        case list():
            return [str(item) for item in value]
        case _:
            msg = f"'{key}' must be a string or a list of strings."
            raise ConfigError(msg)


def _port(value: object, key: str) -> int:
    try:
        port = int(typ.cast("int | str", value))
    except (TypeError, ValueError) as exc:
        msg = f"'{key}' must be an integer, got {value!r}."
        raise ConfigError(msg) from exc
    if not 0 < port < 65536:
        msg = f"'{key}' must be between 1 and 65535, got {port}."
        raise ConfigError(msg)
    return port


__all__ = ["build_config_from_mapping", "load_build_config"]
