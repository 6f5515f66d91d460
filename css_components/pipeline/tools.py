"""Helpers for invoking the Node-based CSS and bundling tools.

stylelint, PostCSS, and rollup are consumed as black boxes through ``npx``.
This module resolves the launcher, builds the environment those tools expect
(``NODE_PATH`` pointing at the project's ``node_modules`` so materialized
config files can ``require`` plugins), and writes the temporary PostCSS
config that carries the plugin options from the build configuration.
"""

from __future__ import annotations

import json
import os
import shutil
import subprocess
import tempfile
from pathlib import Path

from css_components.config import BuildConfig

# Temporary files should be created with restrictive permissions
_TEMP_FILE_MODE = 0o600


class ToolNotFoundError(FileNotFoundError):
    """Raised when the Node tool launcher is not available on ``PATH``."""


class NodeToolRunner:
    """Run ``npx`` commands from the component library root."""

    def __init__(self, root: Path, *, npx_exe: str | None = None) -> None:
        self.root = root
        self._npx_exe = npx_exe

    @property
    def executable(self) -> str:
        """Return the resolved ``npx`` launcher path."""
        cmd = self._npx_exe or shutil.which("npx")
        if not cmd:
            msg = "npx is required to run the Node CSS tooling"
            raise ToolNotFoundError(msg)
        return cmd

    def build_env(self) -> dict[str, str]:
        """Construct the environment for Node tool invocations."""
        env = os.environ.copy()
        node_modules = str(self.root / "node_modules")
        existing = env.get("NODE_PATH")
        env["NODE_PATH"] = (
            f"{node_modules}{os.pathsep}{existing}" if existing else node_modules
        )
        env.setdefault("FORCE_COLOR", "0")
        return env

    def run(
        self, tool: str, args: list[str], *, check: bool = True
    ) -> subprocess.CompletedProcess[str]:
        """Invoke ``npx --no-install <tool> <args>`` and capture its output."""
        return subprocess.run(  # noqa: S603
            [self.executable, "--no-install", tool, *args],
            check=check,
            cwd=self.root,
            env=self.build_env(),
            text=True,
            capture_output=True,
        )


def materialize_postcss_config(config: BuildConfig) -> Path:
    """Return a temp directory holding ``postcss.config.js`` for ``config``.

    The caller owns the directory and should remove it once PostCSS exits.
    """
    base64_root = config.postcss.base64_root or config.paths.source_dir
    options = {
        "base64": {
            "extensions": config.postcss.base64_extensions,
            "root": f"{base64_root}{os.sep}",
        },
        "cssnext": {"browsers": config.postcss.browsers},
        "reporter": {
            "clearAllMessages": True,
            "clearReportedMessages": True,
            "throwError": False,
        },
    }
    lines = [
        f"const options = {json.dumps(options, indent=2)};",
        "",
        "module.exports = {",
        "  plugins: [",
        "    require('postcss-import'),",
        "    require('postcss-base64')(options.base64),",
        "    require('postcss-cssnext')(options.cssnext),",
        "    require('postcss-reporter')(options.reporter),",
        "  ],",
        "};",
    ]
    tmp = Path(tempfile.mkdtemp(prefix="css-components-postcss-"))
    config_path = tmp / "postcss.config.js"
    config_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    os.chmod(config_path, _TEMP_FILE_MODE)
    return tmp


__all__ = ["NodeToolRunner", "ToolNotFoundError", "materialize_postcss_config"]
