"""High-level orchestration for the component preview page.

:class:`PreviewGenerator` parses the built stylesheet into components, decides
through :func:`~css_components.preview.decision.decide_regeneration` whether
the preview needs rebuilding, and when it does copies the static preview
assets, bundles the preview app with rollup, and renders ``index.html`` from
a Jinja template fed with the components, theme names, and pattern
documents.

Example
-------
>>> from pathlib import Path
>>> from css_components.config import load_build_config
>>> from css_components.preview import PreviewGenerator
>>> config = load_build_config(Path("css-components.yaml"))  # doctest: +SKIP
>>> generator = PreviewGenerator(config)  # doctest: +SKIP
>>> generator.generate().should_rebuild  # doctest: +SKIP
True
"""

from __future__ import annotations

import datetime as dt
import logging
import shutil
import subprocess
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from ruamel.yaml import YAML

from css_components.config import BuildConfig
from css_components.pipeline import NodeToolRunner, find_theme_stylesheets

from .annotations import parse_stylesheet
from .decision import decide_regeneration, markup_token
from .models import Component, PreviewState, RegenerationDecision

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "index.html.jinja"
PREVIEW_ASSET_PATTERNS = ("*.svg", "*.css")
BABEL_PLUGIN = (
    "babel={babelHelpers:'bundled',babelrc:false,exclude:'node_modules/**',"
    "presets:[['@babel/preset-env',{modules:false}]]}"
)


class PreviewGenerator:
    """Parse components and render the static preview page."""

    def __init__(
        self,
        config: BuildConfig,
        *,
        runner: NodeToolRunner | None = None,
        templates_dir: Path | None = None,
        on_reload: typ.Callable[[], None] | None = None,
        state: PreviewState | None = None,
    ) -> None:
        """Initialize the generator with configuration and template context.

        Parameters
        ----------
        config : BuildConfig
            Paths for the built stylesheet, preview sources, and outputs.
        runner : NodeToolRunner, optional
            Launcher used to run rollup; defaults to ``npx`` from the project root.
        templates_dir : Path, optional
            Directory containing the page template; defaults to the configured
            template's folder, then to the package templates.
        on_reload : Callable[[], None], optional
            Called after the page is rewritten so connected browsers reload.
        state : PreviewState, optional
            Retained state from an earlier pass; defaults to a fresh state that
            forces the first pass to rebuild.
        """
        self.config = config
        self.paths = config.paths
        self.runner = runner or NodeToolRunner(config.paths.root)
        self.on_reload = on_reload
        self.state = state or PreviewState()

        template_name = DEFAULT_TEMPLATE
        if templates_dir is None and self.paths.template is not None:
            templates_dir = self.paths.template.parent
            template_name = self.paths.template.name
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.templates_dir = templates_dir or default_templates
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.policies["json.dumps_kwargs"] = {
            "sort_keys": True,
            "default": _json_default,
        }
        self.template_name = template_name

    def generate(self) -> RegenerationDecision:
        """Rebuild and render the preview only when the markup token changed.

        Returns
        -------
        RegenerationDecision
            The decision taken for this pass; its ``state`` is retained for
            the next call.

        Raises
        ------
        FileNotFoundError
            If the stylesheet, template, or patterns file is missing.
        subprocess.CalledProcessError
            If bundling the preview app fails. The retained state is left
            untouched so the next pass retries the rebuild.
        """
        components = self.parse_components()
        decision = decide_regeneration(self.state, components)
        if decision.should_rebuild:
            logger.info("Component markup changed; rebuilding preview")
            self.refresh_assets()
            self.bundle_app()
            self.render(components)
            self._reload()
        else:
            logger.info("Component markup unchanged; skipping preview rebuild")
        self.state = decision.state
        return decision

    def regenerate(self) -> Path:
        """Render the preview page unconditionally.

        Callers are expected to have refreshed assets and rebuilt the bundle
        first (the ``generate-preview-force`` task depends on both).
        """
        components = self.parse_components()
        output = self.render(components)
        self._reload()
        self.state = PreviewState(markup_token=markup_token(components), rendered=True)
        return output

    def parse_components(self) -> list[Component]:
        """Return the components annotated in the built main stylesheet."""
        return parse_stylesheet(self.paths.main_stylesheet)

    def discover_themes(self) -> list[str]:
        """Return theme names derived from the built stylesheet filenames."""
        return [
            path.stem
            for path in find_theme_stylesheets(
                self.paths.build_dir, self.paths.stylesheet_patterns
            )
        ]

    def load_patterns(self) -> list[typ.Any]:
        """Load every document of the multi-document patterns YAML file."""
        loader = YAML(typ="safe")
        with self.paths.patterns.open("r", encoding="utf-8") as handle:
            return [doc for doc in loader.load_all(handle) if doc is not None]

    def refresh_assets(self) -> list[Path]:
        """Copy static preview assets (SVG and CSS) into the build directory."""
        self.paths.build_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for pattern in PREVIEW_ASSET_PATTERNS:
            for source in sorted(self.paths.previewer_dir.glob(pattern)):
                if not source.is_file():
                    continue
                target = self.paths.build_dir / source.name
                shutil.copyfile(source, target)
                written.append(target)
        return written

    def bundle_app(self) -> Path:
        """Bundle the preview application with rollup.

        Raises
        ------
        subprocess.CalledProcessError
            If rollup exits with a non-zero status.
        """
        bundle = self.paths.app_bundle
        bundle.parent.mkdir(parents=True, exist_ok=True)
        args = [
            str(self.paths.app_entry),
            "--file",
            str(bundle),
            "--format",
            "umd",
            "--name",
            "previewApp",
            "--sourcemap",
            "inline",
            "--plugin",
            "commonjs",
            "--plugin",
            BABEL_PLUGIN,
        ]
        try:
            self.runner.run("rollup", args)
        except subprocess.CalledProcessError as exc:
            logger.error("rollup failed: %s", (exc.stderr or "").strip())
            raise
        return bundle

    def render(self, components: typ.Sequence[Component]) -> Path:
        """Render ``index.html`` from the components, themes, and patterns."""
        template = self.env.get_template(self.template_name)
        context = {
            "components": [component.to_json() for component in components],
            "themes": self.discover_themes(),
            "patterns": self.load_patterns(),
        }
        html = template.render(**context)
        if not html.endswith("\n"):
            html += "\n"
        self.paths.build_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.paths.build_dir / "index.html"
        output_path.write_text(html, encoding="utf-8")
        return output_path

    def _reload(self) -> None:
        if self.on_reload is not None:
            self.on_reload()


def _json_default(value: object) -> object:
    """Encode YAML values that have no JSON counterpart."""
    if isinstance(value, dt.date | dt.time):
        return value.isoformat()
    if isinstance(value, set | frozenset):
        return sorted(value, key=str)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


__all__ = ["PreviewGenerator"]
