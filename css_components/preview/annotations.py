r"""Parse component annotations out of a compiled stylesheet.

A component is documented by a CSS comment whose first line starts with the
``~`` sentinel; the rest of the comment is a YAML mapping describing the
component, for example::

    /*~
      name: Button
      category: Button
      elements: ons-button
      markup: |
        <button class="button">Button</button>
    */

Comment gutters (a leading ``*`` on every line) are stripped before the YAML
is loaded, so JSDoc-style blocks are accepted too.

Example
-------
>>> from css_components.preview.annotations import parse_components
>>> css = "/*~\n  name: Button\n  markup: <button></button>\n*/\n.button {}"
>>> [component.name for component in parse_components(css)]
['Button']
"""

from __future__ import annotations

import logging
import re
import textwrap
import typing as typ
from io import StringIO
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from css_components._constants import COMPONENT_SENTINEL

from .models import Component

logger = logging.getLogger(__name__)

COMMENT_PATTERN = re.compile(r"/\*(.*?)\*/", re.DOTALL)
GUTTER_PATTERN = re.compile(r"^[ \t]*\*(?: |$)")


class AnnotationError(ValueError):
    """Raised when an annotation block contains malformed YAML."""


def parse_components(
    css: str, *, sentinel: str = COMPONENT_SENTINEL
) -> list[Component]:
    """Return the annotated components of ``css`` in stylesheet order.

    Parameters
    ----------
    css : str
        Compiled stylesheet text.
    sentinel : str, optional
        Prefix marking a comment as a component annotation; defaults to ``~``.

    Returns
    -------
    list[Component]
        Components in the order their annotations appear. Empty when the
        stylesheet carries no annotations.

    Raises
    ------
    AnnotationError
        If an annotation's YAML cannot be parsed.
    """
    loader = YAML(typ="safe")
    components: list[Component] = []
    used: set[str] = set()
    for match in COMMENT_PATTERN.finditer(css):
        body = _annotation_body(match.group(1), sentinel)
        if body is None:
            continue
        line = css.count("\n", 0, match.start()) + 1
        try:
            loaded = loader.load(StringIO(body))
        except YAMLError as exc:
            msg = f"Malformed component annotation at line {line}: {exc}"
            raise AnnotationError(msg) from exc
        if not isinstance(loaded, dict):
            logger.warning("Ignoring non-mapping annotation at line %s", line)
            continue
        annotation: dict[str, typ.Any] = dict(loaded)
        name = str(annotation.get("name") or f"Component {len(components) + 1}")
        components.append(
            Component(
                name=name,
                id=_unique_slug(_slugify(name), used),
                annotation=annotation,
                line=line,
            )
        )
    return components


def parse_stylesheet(path: Path) -> list[Component]:
    """Read ``path`` and parse its component annotations.

    Raises
    ------
    FileNotFoundError
        If the stylesheet has not been built.
    """
    return parse_components(path.read_text(encoding="utf-8"))


def _annotation_body(comment: str, sentinel: str) -> str | None:
    """Return the YAML text of an annotation comment, or ``None`` for plain comments."""
    first, _, rest = comment.partition("\n")
    if not first.strip().startswith(sentinel):
        return None
    head = first.strip()[len(sentinel) :]
    lines = rest.splitlines()
    if lines and all(GUTTER_PATTERN.match(ln) for ln in lines if ln.strip()):
        lines = [GUTTER_PATTERN.sub("", ln, count=1) for ln in lines]
    body = textwrap.dedent("\n".join(lines)) + "\n"
    if head.strip():
        body = f"{head.strip()}\n{body}"
    return body


def _slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "component"


def _unique_slug(base: str, used: set[str]) -> str:
    """Generate a unique slug, appending numeric suffixes when needed."""
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


__all__ = ["AnnotationError", "parse_components", "parse_stylesheet"]
