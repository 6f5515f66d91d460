"""Tests for preview asset refresh, bundling, and HTML rendering."""

from __future__ import annotations

import json
import subprocess
import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from ruamel.yaml.error import YAMLError

from css_components.config import BuildConfig
from css_components.preview import PreviewGenerator, PreviewState


@pytest.fixture
def generator(build_config: BuildConfig, fake_runner: typ.Any) -> PreviewGenerator:
    return PreviewGenerator(build_config, runner=fake_runner)


@pytest.fixture
def built(write_built: typ.Callable[..., Path], main_stylesheet: str) -> Path:
    write_built(main_stylesheet.replace("red", "white"), "dark-onsen-css-components.css")
    write_built("/* minified */", "onsen-css-components.min.css")
    return write_built(main_stylesheet)


def _soup(path: Path) -> BeautifulSoup:
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


def test_first_generate_rebuilds_everything(
    generator: PreviewGenerator, built: Path, fake_runner: typ.Any
) -> None:
    reloads: list[str] = []
    generator.on_reload = lambda: reloads.append("reload")

    decision = generator.generate()

    build_dir = built.parent
    assert decision.should_rebuild is True
    assert fake_runner.tools() == ["rollup"]
    assert (build_dir / "app.gen.js").is_file()
    assert (build_dir / "previewer.css").is_file()
    assert (build_dir / "logo.svg").is_file()
    assert not (build_dir / "notes.txt").exists()
    assert (build_dir / "index.html").is_file()
    assert reloads == ["reload"]
    assert generator.state.rendered is True


def test_second_generate_with_same_markup_skips(
    generator: PreviewGenerator, built: Path, fake_runner: typ.Any
) -> None:
    generator.generate()
    index = built.parent / "index.html"
    index.unlink()

    decision = generator.generate()

    assert decision.should_rebuild is False
    assert fake_runner.tools() == ["rollup"]
    assert not index.exists()


def test_changed_markup_rebuilds(
    generator: PreviewGenerator,
    built: Path,
    fake_runner: typ.Any,
    write_built: typ.Callable[..., Path],
    main_stylesheet: str,
) -> None:
    generator.generate()
    write_built(main_stylesheet.replace('<label class="switch">', '<label class="switch" x="1">'))

    decision = generator.generate()

    assert decision.should_rebuild is True
    assert fake_runner.tools() == ["rollup", "rollup"]
    assert 'x="1"' in (built.parent / "index.html").read_text(encoding="utf-8")


def test_css_only_change_skips_rebuild(
    generator: PreviewGenerator,
    built: Path,
    fake_runner: typ.Any,
    write_built: typ.Callable[..., Path],
    main_stylesheet: str,
) -> None:
    generator.generate()
    write_built(main_stylesheet.replace("color: red", "color: blue"))

    assert generator.generate().should_rebuild is False
    assert fake_runner.tools() == ["rollup"]


def test_regenerate_renders_even_when_unchanged(
    generator: PreviewGenerator, built: Path
) -> None:
    generator.generate()
    index = built.parent / "index.html"
    index.unlink()
    reloads: list[str] = []
    generator.on_reload = lambda: reloads.append("reload")

    output = generator.regenerate()

    assert output == index
    assert index.is_file()
    assert reloads == ["reload"]
    assert generator.state.markup_token.startswith('<button class="button">')


def test_rendered_page_lists_components_themes_and_patterns(
    generator: PreviewGenerator, built: Path
) -> None:
    generator.generate()

    soup = _soup(built.parent / "index.html")
    ids = [node["data-component-id"] for node in soup.select(".component")]
    assert ids == ["button", "switch"]
    assert soup.select_one("#button .component__example button.button") is not None
    assert [opt["value"] for opt in soup.select(".theme-select option")] == [
        "dark-onsen-css-components",
        "onsen-css-components",
    ]
    pattern_names = [node.get_text(strip=True) for node in soup.select(".pattern__name")]
    assert pattern_names == ["Toolbar with button", "List"]


def test_rendered_page_embeds_json_data(generator: PreviewGenerator, built: Path) -> None:
    generator.generate()

    script = _soup(built.parent / "index.html").find("script", src=None).string
    components_line = next(
        line for line in script.splitlines() if "window.COMPONENTS" in line
    )
    payload = components_line.split("=", 1)[1].strip().rstrip(";")
    data = json.loads(payload)
    assert data[0]["annotation"]["markup"] == '<button class="button">Button</button>'


def test_discover_themes_ignores_minified(generator: PreviewGenerator, built: Path) -> None:
    assert generator.discover_themes() == [
        "dark-onsen-css-components",
        "onsen-css-components",
    ]


def test_bundle_failure_propagates_and_keeps_state(
    generator: PreviewGenerator, built: Path, fake_runner: typ.Any
) -> None:
    fake_runner.returncodes["rollup"] = 1

    with pytest.raises(subprocess.CalledProcessError):
        generator.generate()

    assert generator.state == PreviewState()


def test_missing_stylesheet_is_fatal(generator: PreviewGenerator) -> None:
    with pytest.raises(FileNotFoundError):
        generator.generate()


def test_missing_patterns_file_is_fatal(
    generator: PreviewGenerator, built: Path, build_config: BuildConfig
) -> None:
    build_config.paths.patterns.unlink()

    with pytest.raises(FileNotFoundError):
        generator.generate()


def test_malformed_patterns_file_is_fatal(
    generator: PreviewGenerator, built: Path, build_config: BuildConfig
) -> None:
    build_config.paths.patterns.write_text("name: [oops\n", encoding="utf-8")

    with pytest.raises(YAMLError):
        generator.generate()


def test_bundle_arguments(generator: PreviewGenerator, fake_runner: typ.Any) -> None:
    bundle = generator.bundle_app()

    tool, args, check = fake_runner.calls[0]
    assert tool == "rollup"
    assert check is True
    assert args[0].endswith("app.js")
    assert args[args.index("--format") + 1] == "umd"
    assert args[args.index("--sourcemap") + 1] == "inline"
    assert "commonjs" in args
    assert any(arg.startswith("babel=") for arg in args)
    assert bundle.name == "app.gen.js"


def test_custom_template(
    build_config: BuildConfig, fake_runner: typ.Any, built: Path, tmp_path: Path
) -> None:
    template_dir = tmp_path / "templates"
    template_dir.mkdir()
    (template_dir / "preview.html.jinja").write_text(
        "{% for c in components %}{{ c.name }};{% endfor %}{{ themes | length }}",
        encoding="utf-8",
    )
    build_config.paths.template = template_dir / "preview.html.jinja"

    output = PreviewGenerator(build_config, runner=fake_runner).regenerate()

    assert output.read_text(encoding="utf-8") == "Button;Switch;2\n"


def test_yaml_timestamps_render_as_iso_strings(
    generator: PreviewGenerator,
    write_built: typ.Callable[..., Path],
    build_config: BuildConfig,
) -> None:
    write_built(
        "/*~\n  name: Button\n  since: 2017-05-01\n  markup: <button></button>\n*/\n"
    )
    build_config.paths.patterns.write_text(
        "name: Dated\nupdated: 2018-01-02 03:04:05\n", encoding="utf-8"
    )

    generator.generate()

    html = (build_config.paths.build_dir / "index.html").read_text(encoding="utf-8")
    assert '"since": "2017-05-01"' in html
    assert '"updated": "2018-01-02T03:04:05"' in html


def test_rendered_page_shows_component_category(
    generator: PreviewGenerator, built: Path
) -> None:
    generator.generate()

    soup = _soup(built.parent / "index.html")
    categories = [
        node.get_text(strip=True) for node in soup.select(".component__category")
    ]
    assert categories == ["Button", "Switch"]
