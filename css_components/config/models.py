"""Typed dataclasses describing the css-components build configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from css_components._constants import DEFAULT_STYLESHEET_NAME

DEFAULT_BROWSERS = (
    "> 1%",
    "Firefox ESR",
    "Opera 12.1",
    "Android >= 4.4",
    "iOS >= 8.0",
    "Chrome >= 30",
    "Safari >= 9",
)
DEFAULT_LINT_EXCLUDES = (
    "src/components/combination.css",
    "src/iphonex-support/**/*.css",
)


class ConfigError(ValueError):
    """Raised when the build configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class PathsConfig:
    """Filesystem layout of the component library, resolved against the root."""

    root: Path
    source_dir: Path
    build_dir: Path
    prefix_dir: Path
    previewer_dir: Path
    patterns: Path
    app_entry: Path
    app_bundle: Path
    template: Path | None = None
    stylesheet_name: str = DEFAULT_STYLESHEET_NAME

    @property
    def stylesheet_patterns(self) -> tuple[str, str]:
        """Return the glob patterns matching theme stylesheets (``{*-,}name.css``)."""
        return (f"{self.stylesheet_name}.css", f"*-{self.stylesheet_name}.css")

    @property
    def main_stylesheet(self) -> Path:
        """Return the built stylesheet parsed for component annotations."""
        return self.build_dir / f"{self.stylesheet_name}.css"


@dc.dataclass(slots=True)
class LintConfig:
    """Options forwarded to stylelint."""

    exclude: list[str] = dc.field(default_factory=lambda: list(DEFAULT_LINT_EXCLUDES))
    formatter: str = "string"


@dc.dataclass(slots=True)
class PostcssConfig:
    """Plugin options used when materializing the PostCSS config."""

    browsers: list[str] = dc.field(default_factory=lambda: list(DEFAULT_BROWSERS))
    base64_extensions: list[str] = dc.field(default_factory=lambda: [".svg"])
    base64_root: Path | None = None


@dc.dataclass(slots=True)
class ServerConfig:
    """Dev server binding."""

    host: str = "0.0.0.0"  # noqa: S104 - the dev server advertises an external URL
    port: int = 4321
    live_port: int = 35729


@dc.dataclass(slots=True)
class BuildConfig:
    """Aggregate configuration consumed by the pipeline, preview, and server."""

    paths: PathsConfig
    lint: LintConfig = dc.field(default_factory=LintConfig)
    postcss: PostcssConfig = dc.field(default_factory=PostcssConfig)
    server: ServerConfig = dc.field(default_factory=ServerConfig)


__all__ = [
    "DEFAULT_BROWSERS",
    "DEFAULT_LINT_EXCLUDES",
    "BuildConfig",
    "ConfigError",
    "LintConfig",
    "PathsConfig",
    "PostcssConfig",
    "ServerConfig",
]
