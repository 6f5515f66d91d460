"""Live-reload development server for the component preview.

The server exposes the build directory through ``livereload`` and re-enters
the task graph when watched sources change:

* stylesheet sources trigger ``build-css`` followed by ``generate-preview``;
* preview-app sources and the patterns file trigger
  ``generate-preview-force``.

Whenever the preview page is re-rendered while serving, connected browsers get
a full page reload; stylesheet-only rebuilds keep livereload's CSS hot-swap.

Requests that look like client-side routes (``GET``/``HEAD``, accepting HTML,
no file extension in the last path segment) fall back to ``index.html`` so
the preview app can handle its own routing.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import mimetypes
import socket
import subprocess
import sys
import time
import typing as typ
from pathlib import Path
from urllib.parse import unquote

from livereload import Server
from livereload.handlers import LiveReloadHandler
from ruamel.yaml.error import YAMLError

from css_components._constants import RESET_CONSOLE_SEQUENCE
from css_components.config import BuildConfig
from css_components.pipeline import find_theme_stylesheets
from css_components.preview import PreviewGenerator
from css_components.tasks import TaskError, TaskGraph

logger = logging.getLogger(__name__)

HTML_ACCEPT_TYPES = ("text/html", "*/*")
FALLBACK_METHODS = ("GET", "HEAD")
WATCH_ERRORS = (
    TaskError,
    subprocess.CalledProcessError,
    OSError,
    TypeError,
    ValueError,
    YAMLError,
)
# Window in which repeated info requests print once.
INFO_DEBOUNCE_SECONDS = 0.06

StartResponse = typ.Callable[..., typ.Any]


def reset_console(stream: typ.TextIO | None = None) -> None:
    """Clear the terminal with the ``ESC c`` reset sequence."""
    out = stream or sys.stdout
    out.write(RESET_CONSOLE_SEQUENCE)
    out.flush()


class HistoryFallbackApp:
    """WSGI app serving static files with history-API fallback to the index."""

    def __init__(self, root: Path, *, index: str = "index.html") -> None:
        self.root = root.resolve()
        self.index = index

    def __call__(
        self, environ: dict[str, typ.Any], start_response: StartResponse
    ) -> list[bytes]:
        method = str(environ.get("REQUEST_METHOD", "GET")).upper()
        target = self.resolve(
            method,
            str(environ.get("PATH_INFO") or "/"),
            str(environ.get("HTTP_ACCEPT", "")),
        )
        if target is None:
            body = b"Not Found"
            start_response(
                "404 Not Found",
                [("Content-Type", "text/plain"), ("Content-Length", str(len(body)))],
            )
            return [body]

        data = target.read_bytes()
        content_type = mimetypes.guess_type(target.name)[0] or "application/octet-stream"
        if content_type.startswith("text/") or content_type.endswith("javascript"):
            content_type += "; charset=utf-8"
        start_response(
            "200 OK",
            [
                ("Content-Type", content_type),
                ("Content-Length", str(len(data))),
                ("Cache-Control", "no-cache"),
            ],
        )
        return [b""] if method == "HEAD" else [data]

    def resolve(self, method: str, path: str, accept: str) -> Path | None:
        """Return the file answering ``path``, or ``None`` for a 404."""
        relative = unquote(path).lstrip("/")
        candidate = (self.root / relative).resolve()
        try:
            candidate.relative_to(self.root)
        except ValueError:
            return None
        if candidate.is_dir():
            candidate = candidate / self.index
        if candidate.is_file():
            return candidate
        if self._accepts_fallback(method, relative, accept):
            index = self.root / self.index
            return index if index.is_file() else None
        return None

    @staticmethod
    def _accepts_fallback(method: str, relative: str, accept: str) -> bool:
        if method not in FALLBACK_METHODS:
            return False
        if not any(kind in accept for kind in HTML_ACCEPT_TYPES):
            return False
        last_segment = relative.rstrip("/").rsplit("/", 1)[-1]
        return "." not in last_segment


@dc.dataclass(frozen=True, slots=True)
class WatchRule:
    """Map a watched path to the tasks re-run when it changes."""

    path: Path
    targets: tuple[str, ...]
    suffix: str | None = None

    def ignore(self, filename: str) -> bool:
        """Return true for files the rule does not care about."""
        return self.suffix is not None and not filename.endswith(self.suffix)


class DevServer:
    """Serve the build directory and rebuild on source changes."""

    def __init__(
        self,
        config: BuildConfig,
        graph: TaskGraph,
        *,
        preview: PreviewGenerator | None = None,
        server_factory: typ.Callable[..., Server] = Server,
        stream: typ.TextIO | None = None,
        clock: typ.Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.graph = graph
        self.preview = preview
        self._server_factory = server_factory
        self._stream = stream
        self._clock = clock
        self._last_info: float | None = None

    @property
    def stream(self) -> typ.TextIO:
        return self._stream or sys.stdout

    @property
    def local_url(self) -> str:
        return f"http://localhost:{self.config.server.port}"

    @property
    def external_url(self) -> str:
        try:
            address = socket.gethostbyname(socket.gethostname())
        except OSError:
            address = "127.0.0.1"
        return f"http://{address}:{self.config.server.port}"

    def watch_rules(self) -> list[WatchRule]:
        """Return the watch rules for stylesheet and preview sources."""
        paths = self.config.paths
        return [
            WatchRule(paths.source_dir, ("build-css", "generate-preview"), ".css"),
            WatchRule(paths.previewer_dir, ("generate-preview-force",)),
            WatchRule(paths.patterns, ("generate-preview-force",)),
        ]

    def rebuild(self, targets: tuple[str, ...]) -> bool:
        """Re-run ``targets`` after a change, reporting failures without exiting.

        Returns
        -------
        bool
            ``True`` when every task finished, ``False`` when one failed.
        """
        reset_console(self.stream)
        try:
            self.graph.run(*targets)
        except WATCH_ERRORS:
            logger.exception("Rebuild of %s failed", ", ".join(targets))
            return False
        finally:
            self.announce()
        return True

    def reload_browsers(self) -> None:
        """Ask connected browsers to reload the page rather than swap stylesheets."""
        LiveReloadHandler.reload_waiters(path="/index.html")

    def serve(self) -> None:
        """Start watching sources and serving the build directory (blocking)."""
        app = HistoryFallbackApp(self.config.paths.build_dir)
        server = self._server_factory(app=app)
        for rule in self.watch_rules():
            server.watch(
                str(rule.path),
                self._make_callback(rule.targets),
                ignore=rule.ignore if rule.suffix else None,
            )
        if self.preview is not None:
            self.preview.on_reload = self.reload_browsers
        self.print_info()
        server.serve(
            port=self.config.server.port,
            host=self.config.server.host,
            liveport=self.config.server.live_port,
            debug=False,
            open_url_delay=None,
        )

    def announce(self) -> None:
        """Print the server info once per burst of rebuilds."""
        now = self._clock()
        last = self._last_info
        if last is not None and now - last < INFO_DEBOUNCE_SECONDS:
            return
        self._last_info = now
        self.print_info()

    def print_info(self) -> None:
        """Print the access URLs and the built CSS files."""
        out = self.stream
        print("\nAccess URLs:", file=out)
        print(f"     Local: {self.local_url}", file=out)
        print(f"  External: {self.external_url}", file=out)
        print(file=out)
        print("Built CSS Files:", file=out)
        paths = self.config.paths
        for css_path in find_theme_stylesheets(
            paths.build_dir, paths.stylesheet_patterns
        ):
            print(f"  {_relative_display(css_path, paths.root)}", file=out)

    def _make_callback(self, targets: tuple[str, ...]) -> typ.Callable[[], None]:
        def _callback() -> None:
            self.rebuild(targets)

        return _callback


def _relative_display(path: Path, root: Path) -> str:
    try:
        return "./" + path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


__all__ = [
    "DevServer",
    "HistoryFallbackApp",
    "WatchRule",
    "reset_console",
]
