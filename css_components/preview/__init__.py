"""Component preview generation: annotation parsing, rebuild decision, rendering."""

from .annotations import AnnotationError, parse_components, parse_stylesheet
from .decision import decide_regeneration, markup_token
from .generator import PreviewGenerator
from .models import Component, PreviewState, RegenerationDecision

__all__ = [
    "AnnotationError",
    "Component",
    "PreviewGenerator",
    "PreviewState",
    "RegenerationDecision",
    "decide_regeneration",
    "markup_token",
    "parse_components",
    "parse_stylesheet",
]
