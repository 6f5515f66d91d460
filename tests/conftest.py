"""Shared fixtures: a throwaway component library and a fake Node tool runner."""

from __future__ import annotations

import shutil
import subprocess
import typing as typ
from pathlib import Path
from textwrap import dedent
from types import SimpleNamespace

import pytest

from css_components.config import BuildConfig, build_config_from_mapping

MAIN_STYLESHEET = dedent(
    """\
    /* plain comment, not a component */
    /*~
      name: Button
      category: Button
      elements: ons-button
      markup: <button class="button">Button</button>
    */
    .button { color: red; }

    /*~
      name: Switch
      category: Switch
      markup: <label class="switch"></label>
    */
    .switch { display: inline-block; }
    """
)


class FakeRunner:
    """Stand-in for ``NodeToolRunner`` that mimics the tools' file effects."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, list[str], bool]] = []
        self.returncodes: dict[str, int] = {}
        self.output: dict[str, str] = {}

    def run(
        self, tool: str, args: list[str], *, check: bool = True
    ) -> SimpleNamespace:
        self.calls.append((tool, list(args), check))
        returncode = self.returncodes.get(tool, 0)
        if returncode and check:
            raise subprocess.CalledProcessError(
                returncode, [tool, *args], output="", stderr=f"{tool} failed"
            )
        if returncode == 0 and tool == "postcss":
            target = Path(args[args.index("--output") + 1])
            shutil.copyfile(args[0], target)
        if returncode == 0 and tool == "rollup":
            target = Path(args[args.index("--file") + 1])
            target.write_text("/* bundle */\n", encoding="utf-8")
        return SimpleNamespace(
            returncode=returncode, stdout=self.output.get(tool, ""), stderr=""
        )

    def tools(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def main_stylesheet() -> str:
    return MAIN_STYLESHEET


@pytest.fixture
def library_root(tmp_path: Path) -> Path:
    """Create a component library checkout with sources and preview files."""
    root = tmp_path / "css-components"
    src = root / "src"
    (src / "components").mkdir(parents=True)
    (src / "onsen-css-components.css").write_text(MAIN_STYLESHEET, encoding="utf-8")
    (src / "dark-onsen-css-components.css").write_text(
        MAIN_STYLESHEET.replace("red", "white"), encoding="utf-8"
    )
    (src / "components" / "button.css").write_text(".button {}\n", encoding="utf-8")

    previewer = root / "previewer-src"
    previewer.mkdir()
    (previewer / "app.js").write_text("console.log('preview');\n", encoding="utf-8")
    (previewer / "previewer.css").write_text("body { margin: 0; }\n", encoding="utf-8")
    (previewer / "logo.svg").write_text("<svg></svg>\n", encoding="utf-8")
    (previewer / "notes.txt").write_text("not an asset\n", encoding="utf-8")

    (root / "patterns.yaml").write_text(
        dedent(
            """\
            name: Toolbar with button
            markup: <div class="toolbar"><button class="button">OK</button></div>
            ---
            name: List
            markup: <ul class="list"></ul>
            """
        ),
        encoding="utf-8",
    )
    return root


@pytest.fixture
def build_config(library_root: Path) -> BuildConfig:
    return build_config_from_mapping({}, root=library_root)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def write_built(build_config: BuildConfig) -> typ.Callable[..., Path]:
    """Return a helper writing a built stylesheet without running the pipeline."""

    def _write(css: str, name: str | None = None) -> Path:
        build_config.paths.build_dir.mkdir(parents=True, exist_ok=True)
        path = build_config.paths.build_dir / (
            name or build_config.paths.main_stylesheet.name
        )
        path.write_text(css, encoding="utf-8")
        return path

    return _write
