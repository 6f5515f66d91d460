"""Style pipeline: lint, transform, and minify the component stylesheets.

The pipeline follows a best-effort policy suited to a live-reload workflow:
lint and transform diagnostics are reported but never abort a run, so the
watcher always has output to serve. Artifacts are written to the flat build
directory and mirrored into the prefix directory that downstream consumers
read from.

Example
-------
>>> from pathlib import Path
>>> from css_components.config import load_build_config
>>> from css_components.pipeline import StylePipeline
>>> pipeline = StylePipeline(load_build_config(Path("css-components.yaml")))  # doctest: +SKIP
>>> pipeline.transform()  # doctest: +SKIP
[PosixPath('build/onsen-css-components.css'), ...]
"""

from __future__ import annotations

import dataclasses as dc
import logging
import shutil
import sys
import typing as typ
from pathlib import Path

from cssmin import cssmin

from css_components._constants import MINIFIED_TEMPLATE
from css_components.config import BuildConfig
from css_components.pipeline.tools import (
    NodeToolRunner,
    ToolNotFoundError,
    materialize_postcss_config,
)

logger = logging.getLogger(__name__)


def find_theme_stylesheets(
    directory: Path, patterns: typ.Iterable[str], *, minified: bool = False
) -> list[Path]:
    """Return files in ``directory`` matching the theme ``patterns``, sorted.

    With ``minified`` set, each ``.css`` pattern is matched as ``.min.css``.
    """
    if not directory.is_dir():
        return []
    found: set[Path] = set()
    for pattern in patterns:
        if minified:
            pattern = pattern.removesuffix(".css") + ".min.css"
        found.update(path for path in directory.glob(pattern) if path.is_file())
    return sorted(found)


@dc.dataclass(slots=True)
class LintReport:
    """Outcome of a stylelint run."""

    ok: bool
    output: str


class StylePipeline:
    """Run stylelint, PostCSS, and cssmin over the component stylesheets."""

    def __init__(
        self,
        config: BuildConfig,
        *,
        runner: NodeToolRunner | None = None,
        stream: typ.TextIO | None = None,
    ) -> None:
        """Initialize the pipeline.

        Parameters
        ----------
        config : BuildConfig
            Paths and tool options for the component library.
        runner : NodeToolRunner, optional
            Launcher for the Node tools; defaults to ``npx`` from the project root.
        stream : TextIO, optional
            Where tool diagnostics are echoed; defaults to ``sys.stdout``.
        """
        self.config = config
        self.paths = config.paths
        self.runner = runner or NodeToolRunner(config.paths.root)
        self._stream = stream

    @property
    def stream(self) -> typ.TextIO:
        return self._stream or sys.stdout

    def clean(self) -> list[Path]:
        """Remove built stylesheets and their minified variants from both outputs."""
        removed: list[Path] = []
        for directory in self._output_dirs():
            for path in self._theme_stylesheets(directory, minified=False):
                path.unlink(missing_ok=True)
                removed.append(path)
            for path in self._theme_stylesheets(directory, minified=True):
                path.unlink(missing_ok=True)
                removed.append(path)
        return removed

    def lint(self) -> LintReport:
        """Lint the stylesheet sources, reporting problems without failing."""
        source = self._relative(self.paths.source_dir)
        args = [f"{source}/**/*.css", "--formatter", self.config.lint.formatter]
        for pattern in self.config.lint.exclude:
            args += ["--ignore-pattern", pattern]
        try:
            result = self.runner.run("stylelint", args, check=False)
        except ToolNotFoundError as exc:
            logger.warning("Skipping stylelint: %s", exc)
            return LintReport(ok=False, output=str(exc))
        output = (result.stdout or "") + (result.stderr or "")
        self._echo(output)
        if result.returncode != 0:
            logger.warning("stylelint reported problems (exit %s)", result.returncode)
        return LintReport(ok=result.returncode == 0, output=output)

    def transform(self) -> list[Path]:
        """Run PostCSS over every entry stylesheet and mirror the output.

        Returns
        -------
        list[Path]
            Stylesheets written to the build and prefix directories. Entries
            whose transform failed are reported and left out.

        Raises
        ------
        ToolNotFoundError
            If ``npx`` is not available.
        """
        entries = self._theme_stylesheets(self.paths.source_dir, minified=False)
        if not entries:
            logger.warning("No entry stylesheets found in %s", self.paths.source_dir)
            return []

        self.paths.build_dir.mkdir(parents=True, exist_ok=True)
        config_dir = materialize_postcss_config(self.config)
        written: list[Path] = []
        try:
            for entry in entries:
                target = self.paths.build_dir / entry.name
                result = self.runner.run(
                    "postcss",
                    [
                        str(entry),
                        "--config",
                        str(config_dir),
                        "--output",
                        str(target),
                    ],
                    check=False,
                )
                self._echo((result.stdout or "") + (result.stderr or ""))
                if result.returncode != 0:
                    logger.error(
                        "PostCSS failed for %s (exit %s)", entry.name, result.returncode
                    )
                    continue
                written.append(target)
                written.append(self._mirror(target))
        finally:
            shutil.rmtree(config_dir, ignore_errors=True)
        return written

    def minify(self) -> list[Path]:
        """Write ``<name>.min.css`` next to every built stylesheet in both outputs."""
        written: list[Path] = []
        for built in self._theme_stylesheets(self.paths.build_dir, minified=False):
            minified = cssmin(built.read_text(encoding="utf-8"))
            target = built.with_name(MINIFIED_TEMPLATE.format(name=built.stem))
            target.write_text(minified, encoding="utf-8")
            written.append(target)
            written.append(self._mirror(target))
        return written

    def _theme_stylesheets(self, directory: Path, *, minified: bool) -> list[Path]:
        return find_theme_stylesheets(
            directory, self.paths.stylesheet_patterns, minified=minified
        )

    def _mirror(self, path: Path) -> Path:
        """Copy ``path`` into the prefix directory and return the copy."""
        self.paths.prefix_dir.mkdir(parents=True, exist_ok=True)
        target = self.paths.prefix_dir / path.name
        shutil.copyfile(path, target)
        return target

    def _output_dirs(self) -> list[Path]:
        return [self.paths.build_dir, self.paths.prefix_dir]

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.paths.root).as_posix()
        except ValueError:
            return path.as_posix()

    def _echo(self, text: str) -> None:
        if text.strip():
            self.stream.write(text if text.endswith("\n") else text + "\n")


__all__ = ["LintReport", "StylePipeline", "find_theme_stylesheets"]
