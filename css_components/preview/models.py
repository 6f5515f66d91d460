"""Dataclasses shared by the preview parsing, decision, and rendering steps."""

from __future__ import annotations

import dataclasses as dc
import typing as typ


@dc.dataclass(slots=True)
class Component:
    """A documented UI element extracted from a stylesheet annotation.

    Attributes
    ----------
    name : str
        Display name taken from the annotation's ``name`` key.
    id : str
        URL-safe identifier unique within the stylesheet.
    annotation : dict[str, Any]
        Every key parsed from the annotation block (``markup``, ``category``,
        ``elements``, ...).
    line : int
        1-based line of the annotation comment in the stylesheet.
    """

    name: str
    id: str
    annotation: dict[str, typ.Any]
    line: int

    @property
    def markup(self) -> str:
        """Return the example markup snippet, or ``""`` when absent."""
        value = self.annotation.get("markup")
        return "" if value is None else str(value)

    @property
    def category(self) -> str | None:
        value = self.annotation.get("category")
        return None if value is None else str(value)

    def to_json(self) -> dict[str, typ.Any]:
        """Return the JSON-friendly mapping embedded in the preview page."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "annotation": self.annotation,
        }


@dc.dataclass(frozen=True, slots=True)
class PreviewState:
    """Retained outcome of the previous preview generation pass.

    Attributes
    ----------
    markup_token : str
        Markup token computed on the previous pass.
    rendered : bool
        Whether a preview page has been rendered since the process started.
    """

    markup_token: str = ""
    rendered: bool = False


@dc.dataclass(frozen=True, slots=True)
class RegenerationDecision:
    """Result of comparing a fresh component list to the retained state."""

    should_rebuild: bool
    state: PreviewState


__all__ = ["Component", "PreviewState", "RegenerationDecision"]
