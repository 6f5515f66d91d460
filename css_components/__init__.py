"""Build tooling for the CSS component library and its preview page.

This package exposes the CLI used to lint, transform, and minify the component
stylesheets, render the component preview, and serve it with live reload.

Exports
-------
- ``app``: Cyclopts application with one subcommand per build task.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from css_components import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
