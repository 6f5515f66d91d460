"""Decide whether the preview page must be regenerated.

Re-bundling the preview app is expensive compared to a CSS-only edit, so a
generation pass first fingerprints the example markup of every component.
The fingerprint (the *markup token*) is compared with the token retained from
the previous pass; only a change, or a process that has not rendered yet,
triggers the rebuild.

Example
-------
>>> from css_components.preview.decision import decide_regeneration
>>> from css_components.preview.models import Component, PreviewState
>>> button = Component("Button", "button", {"markup": "<button></button>"}, 1)
>>> first = decide_regeneration(PreviewState(), [button])
>>> first.should_rebuild
True
>>> decide_regeneration(first.state, [button]).should_rebuild
False
"""

from __future__ import annotations

import logging
import typing as typ

from .models import Component, PreviewState, RegenerationDecision

logger = logging.getLogger(__name__)


def markup_token(components: typ.Iterable[Component]) -> str:
    """Concatenate the example markup of ``components`` in stylesheet order."""
    return "".join(component.markup for component in components)


def decide_regeneration(
    state: PreviewState, components: typ.Sequence[Component]
) -> RegenerationDecision:
    """Compare a fresh component list with the retained preview state.

    Parameters
    ----------
    state : PreviewState
        State returned by the previous decision (``PreviewState()`` on the
        first pass of a process).
    components : Sequence[Component]
        Components parsed from the stylesheet that was just built.

    Returns
    -------
    RegenerationDecision
        ``should_rebuild`` is true when nothing has been rendered yet or the
        markup token changed. The returned state always carries the new
        token; it is marked as rendered only when a rebuild was requested.

    Notes
    -----
    An empty component list yields the empty token. Once a page has been
    rendered, two consecutive empty tokens count as unchanged, so a transform
    failure that empties the stylesheet does not trigger a rebuild.
    """
    token = markup_token(components)
    if not components:
        logger.warning("No component annotations found; markup token is empty")

    should_rebuild = not state.rendered or token != state.markup_token
    return RegenerationDecision(
        should_rebuild=should_rebuild,
        state=PreviewState(
            markup_token=token, rendered=state.rendered or should_rebuild
        ),
    )


__all__ = ["decide_regeneration", "markup_token"]
