"""Tests for the markup-token regeneration decision."""

from __future__ import annotations

import pytest

from css_components.preview import (
    Component,
    PreviewState,
    decide_regeneration,
    markup_token,
)


def _component(name: str, markup: str | None) -> Component:
    annotation = {"name": name}
    if markup is not None:
        annotation["markup"] = markup
    return Component(name=name, id=name.lower(), annotation=annotation, line=1)


A = _component("A", "<a-tag></a-tag>")
B = _component("B", "<b-tag></b-tag>")
B_CHANGED = _component("B", '<b-tag x="1"></b-tag>')


def test_token_concatenates_markup_in_order() -> None:
    assert markup_token([A, B]) == "<a-tag></a-tag><b-tag></b-tag>"


def test_token_is_order_sensitive() -> None:
    assert markup_token([A, B]) != markup_token([B, A])


def test_missing_markup_contributes_nothing() -> None:
    assert markup_token([A, _component("C", None), B]) == markup_token([A, B])


def test_first_pass_always_rebuilds() -> None:
    decision = decide_regeneration(PreviewState(), [A, B])

    assert decision.should_rebuild is True
    assert decision.state == PreviewState(
        markup_token="<a-tag></a-tag><b-tag></b-tag>", rendered=True
    )


def test_first_pass_rebuilds_even_without_components() -> None:
    decision = decide_regeneration(PreviewState(), [])

    assert decision.should_rebuild is True
    assert decision.state == PreviewState(markup_token="", rendered=True)


def test_identical_markup_skips_rebuild() -> None:
    first = decide_regeneration(PreviewState(), [A, B])

    second = decide_regeneration(first.state, [A, B])

    assert second.should_rebuild is False
    assert second.state == first.state


def test_changed_markup_triggers_rebuild() -> None:
    first = decide_regeneration(PreviewState(), [A, B])

    second = decide_regeneration(first.state, [A, B_CHANGED])

    assert second.should_rebuild is True
    assert second.state.markup_token == '<a-tag></a-tag><b-tag x="1"></b-tag>'


def test_reordering_components_triggers_rebuild() -> None:
    first = decide_regeneration(PreviewState(), [A, B])

    assert decide_regeneration(first.state, [B, A]).should_rebuild is True


def test_end_to_end_sequence() -> None:
    state = PreviewState()
    outcomes = []
    for components in ([A, B], [A, B_CHANGED], [A, B_CHANGED]):
        decision = decide_regeneration(state, components)
        outcomes.append(decision.should_rebuild)
        state = decision.state

    assert outcomes == [True, True, False]


def test_empty_token_after_render_counts_as_unchanged(
    caplog: pytest.LogCaptureFixture,
) -> None:
    rendered_empty = PreviewState(markup_token="", rendered=True)

    decision = decide_regeneration(rendered_empty, [])

    assert decision.should_rebuild is False
    assert "markup token is empty" in caplog.text


def test_decision_does_not_mutate_input_state() -> None:
    state = PreviewState()

    decide_regeneration(state, [A])

    assert state == PreviewState()
