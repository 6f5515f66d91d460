"""Tests for extracting component annotations from compiled CSS."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from css_components.preview import AnnotationError, parse_components, parse_stylesheet


def test_parses_components_in_stylesheet_order(main_stylesheet: str) -> None:
    components = parse_components(main_stylesheet)

    assert [component.name for component in components] == ["Button", "Switch"]
    button = components[0]
    assert button.id == "button"
    assert button.category == "Button"
    assert button.annotation["elements"] == "ons-button"
    assert button.markup == '<button class="button">Button</button>'
    assert button.line == 2


def test_plain_comments_are_ignored() -> None:
    css = "/* regular ~ comment */\n/* another */\n.a { color: red; }\n"

    assert [c.name for c in parse_components(css)] == []


def test_block_scalar_markup_is_preserved() -> None:
    css = dedent(
        """\
        /*~
          name: List
          markup: |
            <ul class="list">
              <li class="list-item">Item</li>
            </ul>
        */
        """
    )

    (component,) = parse_components(css)

    assert component.markup == (
        '<ul class="list">\n  <li class="list-item">Item</li>\n</ul>\n'
    )


def test_comment_gutters_are_stripped() -> None:
    css = dedent(
        """\
        /*~
         * name: Toolbar
         * markup: <div class="toolbar"></div>
         */
        """
    )

    (component,) = parse_components(css)

    assert component.name == "Toolbar"
    assert component.markup == '<div class="toolbar"></div>'


def test_duplicate_names_get_unique_ids() -> None:
    css = "/*~\nname: Button\n*/\n/*~\nname: Button\n*/\n"

    components = parse_components(css)

    assert [c.id for c in components] == ["button", "button-2"]
    assert all(c.markup == "" for c in components)


def test_non_mapping_annotation_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    css = "/*~\n- just\n- a list\n*/\n/*~\nname: Card\n*/\n"

    components = parse_components(css)

    assert [c.name for c in components] == ["Card"]
    assert "non-mapping annotation at line 1" in caplog.text


def test_malformed_annotation_raises() -> None:
    css = "\n\n/*~\nname: [unclosed\n*/\n"

    with pytest.raises(AnnotationError, match="line 3"):
        parse_components(css)


def test_custom_sentinel() -> None:
    css = "/*@doc\nname: Fab\n*/\n/*~\nname: Ignored\n*/\n"

    assert [c.name for c in parse_components(css, sentinel="@doc")] == ["Fab"]


def test_parse_stylesheet_requires_built_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        parse_stylesheet(tmp_path / "onsen-css-components.css")
