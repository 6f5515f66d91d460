"""Stylesheet lint, transform, and minification built on external tools."""

from .stylesheet import LintReport, StylePipeline, find_theme_stylesheets
from .tools import NodeToolRunner, ToolNotFoundError, materialize_postcss_config

__all__ = [
    "LintReport",
    "NodeToolRunner",
    "StylePipeline",
    "ToolNotFoundError",
    "find_theme_stylesheets",
    "materialize_postcss_config",
]
