"""Cyclopts CLI entrypoint exposing every build task as a subcommand.

The ``css-components`` console script runs one named task (and its
dependencies) from the task graph declared in :mod:`css_components.build`.
Typical usage is ``css-components build`` in CI and ``css-components serve``
while editing stylesheets.

Examples
--------
Build stylesheets and the preview page:

>>> from css_components.cli import app
>>> app(["build"])  # doctest: +SKIP

Use a configuration file outside the working directory:

>>> app(["serve", "--config", "../css-components/css-components.yaml"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .build import TASK_HELP, build_task_graph
from .config import load_build_config

DEFAULT_CONFIG = Path("css-components.yaml")
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

app = App(
    name="css-components",
    config=cyclopts.config.Env("CSS_COMPONENTS_", command=False),  # type: ignore[unknown-argument]
)

ConfigOption = typ.Annotated[
    Path,
    Parameter(help="Path to the build config", env_var="CSS_COMPONENTS_CONFIG"),
]
VerboseOption = typ.Annotated[
    bool, Parameter(help="Log debug output", env_var="CSS_COMPONENTS_VERBOSE")
]


def run_task(name: str, *, config: Path, verbose: bool = False) -> list[str]:
    """Load ``config`` and run task ``name`` with its dependencies.

    Parameters
    ----------
    name : str
        Task to run, for example ``"build-css"``.
    config : Path
        Path to the YAML build configuration.
    verbose : bool, optional
        Enable ``DEBUG`` logging.

    Returns
    -------
    list[str]
        Names of the tasks that ran, in execution order.

    Raises
    ------
    FileNotFoundError
        If the configuration file, the built stylesheet, the template, or the
        patterns file is missing.
    UnknownTaskError
        If ``name`` is not a registered task.
    """
    _configure_logging(verbose=verbose)
    build_config = load_build_config(config)
    graph, _session = build_task_graph(build_config)
    return graph.run(name)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )


@app.command(name="build", help=TASK_HELP["build"])
def build(*, config: ConfigOption = DEFAULT_CONFIG, verbose: VerboseOption = False) -> None:
    """Run ``build-css`` followed by ``generate-preview``."""
    run_task("build", config=config, verbose=verbose)


@app.command(name="build-css", help=TASK_HELP["build-css"])
def build_css(
    *, config: ConfigOption = DEFAULT_CONFIG, verbose: VerboseOption = False
) -> None:
    """Run the whole style pipeline."""
    run_task("build-css", config=config, verbose=verbose)


@app.command(name="stylelint", help=TASK_HELP["stylelint"])
def stylelint(
    *, config: ConfigOption = DEFAULT_CONFIG, verbose: VerboseOption = False
) -> None:
    run_task("stylelint", config=config, verbose=verbose)


@app.command(name="cssnext", help=TASK_HELP["cssnext"])
def cssnext(
    *, config: ConfigOption = DEFAULT_CONFIG, verbose: VerboseOption = False
) -> None:
    run_task("cssnext", config=config, verbose=verbose)


@app.command(name="cssmin", help=TASK_HELP["cssmin"])
def cssmin(
    *, config: ConfigOption = DEFAULT_CONFIG, verbose: VerboseOption = False
) -> None:
    run_task("cssmin", config=config, verbose=verbose)


@app.command(name="css-clean", help=TASK_HELP["css-clean"])
def css_clean(
    *, config: ConfigOption = DEFAULT_CONFIG, verbose: VerboseOption = False
) -> None:
    run_task("css-clean", config=config, verbose=verbose)


@app.command(name="generate-preview", help=TASK_HELP["generate-preview"])
def generate_preview(
    *, config: ConfigOption = DEFAULT_CONFIG, verbose: VerboseOption = False
) -> None:
    """Render the preview page from the already built stylesheet.

    A fresh process has no retained markup token, so this always rebuilds;
    the skip path only applies inside ``serve``.
    """
    run_task("generate-preview", config=config, verbose=verbose)


@app.command(name="generate-preview-force", help=TASK_HELP["generate-preview-force"])
def generate_preview_force(
    *, config: ConfigOption = DEFAULT_CONFIG, verbose: VerboseOption = False
) -> None:
    run_task("generate-preview-force", config=config, verbose=verbose)


@app.command(name="preview-assets", help=TASK_HELP["preview-assets"])
def preview_assets(
    *, config: ConfigOption = DEFAULT_CONFIG, verbose: VerboseOption = False
) -> None:
    run_task("preview-assets", config=config, verbose=verbose)


@app.command(name="preview-js", help=TASK_HELP["preview-js"])
def preview_js(
    *, config: ConfigOption = DEFAULT_CONFIG, verbose: VerboseOption = False
) -> None:
    run_task("preview-js", config=config, verbose=verbose)


@app.command(name="serve", help=TASK_HELP["serve"])
def serve(*, config: ConfigOption = DEFAULT_CONFIG, verbose: VerboseOption = False) -> None:
    """Build everything and watch sources until interrupted."""
    run_task("serve", config=config, verbose=verbose)


@app.command(name="reset-console", help=TASK_HELP["reset-console"])
def reset_console(
    *, config: ConfigOption = DEFAULT_CONFIG, verbose: VerboseOption = False
) -> None:
    run_task("reset-console", config=config, verbose=verbose)


def main() -> None:
    """Invoke the Cyclopts application that powers ``css-components``.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
