"""Common literal values used across css_components.

These constants keep artifact names and terminal sequences centralized so the
pipeline, the preview generator, and tests agree on the same filenames.
Intended for internal use within the css_components package.

Examples
--------
>>> from css_components import _constants
>>> _constants.MINIFIED_TEMPLATE.format(name="dark-onsen-css-components")
'dark-onsen-css-components.min.css'
"""

DEFAULT_STYLESHEET_NAME = "onsen-css-components"
MINIFIED_TEMPLATE = "{name}.min.css"
COMPONENT_SENTINEL = "~"
RESET_CONSOLE_SEQUENCE = "\033c"
