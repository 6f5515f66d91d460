"""Wire the style pipeline, preview generator, and dev server into named tasks.

:func:`build_task_graph` declares every command of the ``css-components``
console script together with its dependencies, so ordering lives in data
rather than in call sequences:

* ``build`` runs ``build-css`` and then ``generate-preview``.
* ``build-css`` runs ``css-clean``, ``cssnext`` (which pulls in ``stylelint``)
  and ``cssmin``.
* ``generate-preview-force`` runs ``preview-assets`` and ``preview-js`` first.
* ``serve`` runs ``reset-console`` and ``build`` before starting the server.
"""

from __future__ import annotations

import dataclasses as dc
import sys
import typing as typ
from pathlib import Path

from livereload import Server

from css_components.config import BuildConfig
from css_components.pipeline import NodeToolRunner, StylePipeline
from css_components.preview import PreviewGenerator
from css_components.server import DevServer, reset_console
from css_components.tasks import TaskGraph


# One-line help per task; the CLI registers a command for each key.
TASK_HELP = {
    "reset-console": "Clear the terminal.",
    "css-clean": "Remove built stylesheets from both outputs.",
    "stylelint": "Lint stylesheet sources without failing.",
    "cssnext": "Transform stylesheets with PostCSS.",
    "cssmin": "Minify built stylesheets.",
    "build-css": "Clean, lint, transform, and minify stylesheets.",
    "preview-assets": "Copy static preview assets.",
    "preview-js": "Bundle the preview application with rollup.",
    "generate-preview": "Regenerate the preview page when component markup changed.",
    "generate-preview-force": "Rebuild the preview page and its assets unconditionally.",
    "build": "Build stylesheets and the preview page.",
    "serve": "Build, then serve the preview with live reload.",
}


def format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:
            return str(path)
    return str(path)


@dc.dataclass(slots=True)
class BuildSession:
    """Objects shared by the tasks of one process."""

    config: BuildConfig
    pipeline: StylePipeline
    preview: PreviewGenerator
    server: DevServer
    stream: typ.TextIO | None = None

    def report(self, paths: typ.Iterable[Path]) -> None:
        """Print a ``wrote <path>`` line per written artifact."""
        out = self.stream or sys.stdout
        for path in paths:
            print(f"wrote {format_path(path)}", file=out)


def build_task_graph(
    config: BuildConfig,
    *,
    runner: NodeToolRunner | None = None,
    templates_dir: Path | None = None,
    server_factory: typ.Callable[..., Server] = Server,
    stream: typ.TextIO | None = None,
) -> tuple[TaskGraph, BuildSession]:
    """Return the task graph for ``config`` and the session backing its tasks.

    Parameters
    ----------
    config : BuildConfig
        Component library configuration.
    runner : NodeToolRunner, optional
        Shared launcher for stylelint, PostCSS, and rollup.
    templates_dir : Path, optional
        Override for the preview template directory.
    server_factory : Callable[..., Server], optional
        Factory for the livereload server used by ``serve``.
    stream : TextIO, optional
        Destination for progress output; defaults to ``sys.stdout``.
    """
    runner = runner or NodeToolRunner(config.paths.root)
    graph = TaskGraph()
    preview = PreviewGenerator(config, runner=runner, templates_dir=templates_dir)
    session = BuildSession(
        config=config,
        pipeline=StylePipeline(config, runner=runner, stream=stream),
        preview=preview,
        server=DevServer(
            config,
            graph,
            preview=preview,
            server_factory=server_factory,
            stream=stream,
        ),
        stream=stream,
    )

    def _clean() -> None:
        session.pipeline.clean()

    def _lint() -> None:
        session.pipeline.lint()

    def _transform() -> None:
        session.report(session.pipeline.transform())

    def _minify() -> None:
        session.report(session.pipeline.minify())

    def _preview_assets() -> None:
        session.report(session.preview.refresh_assets())

    def _preview_js() -> None:
        session.report([session.preview.bundle_app()])

    def _generate_preview() -> None:
        decision = session.preview.generate()
        if decision.should_rebuild:
            session.report([config.paths.build_dir / "index.html"])

    def _generate_preview_force() -> None:
        session.report([session.preview.regenerate()])

    def _serve() -> None:
        session.server.serve()

    graph.add("reset-console", lambda: reset_console(stream))
    graph.add("css-clean", _clean)
    graph.add("stylelint", _lint)
    graph.add("cssnext", _transform, deps=["stylelint"], after=["css-clean"])
    graph.add("cssmin", _minify, deps=["cssnext"])
    graph.add("build-css", lambda: None, deps=["css-clean", "cssnext", "cssmin"])
    graph.add("preview-assets", _preview_assets, after=["build-css"])
    graph.add("preview-js", _preview_js, after=["build-css", "preview-assets"])
    graph.add("generate-preview", _generate_preview, after=["build-css"])
    graph.add(
        "generate-preview-force",
        _generate_preview_force,
        deps=["preview-assets", "preview-js"],
        after=["build-css"],
    )
    graph.add("build", lambda: None, deps=["build-css", "generate-preview"])
    graph.add("serve", _serve, deps=["reset-console", "build"])
    return graph, session


__all__ = ["TASK_HELP", "BuildSession", "build_task_graph", "format_path"]
