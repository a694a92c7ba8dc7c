"""Static directory serving delegate.

``serve_dir()`` maps a request path onto a directory tree and answers with
the file, a redirect, a directory listing, or an error response. The
router reaches it through ``Router.mount_static()``, but it can be called
from any handler.

Security: resolves symlinks and verifies the final path is within the
configured root to prevent path traversal.
"""

import functools
import logging
import mimetypes
import stat
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from email.utils import formatdate
from pathlib import Path, PurePath
from typing import Any
from urllib.parse import quote

import anyio
from kida import Environment

from perch.errors import ConfigurationError
from perch.http.request import Request
from perch.http.response import Response

logger = logging.getLogger("perch.static")

_TEXT = "text/plain; charset=utf-8"
_HTML = "text/html; charset=utf-8"

CORS_HEADERS: tuple[tuple[str, str], ...] = (
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Headers", "Origin, X-Requested-With, Content-Type, Accept, Range"),
)


@dataclass(frozen=True, slots=True)
class ServeDirOptions:
    """Options for ``serve_dir()``. Immutable after creation.

    Override what you need::

        options = ServeDirOptions(fs_root="./public", show_dir_listing=True)
        options = options.merged({"quiet": True})
    """

    # Directory served as the root of the URL space
    fs_root: str | Path = "."
    # URL prefix stripped from the request path before resolving files
    url_root: str = ""

    show_dir_listing: bool = False
    show_dotfiles: bool = False
    show_index: bool = True
    enable_cors: bool = False
    quiet: bool = False

    # Extra headers appended to every response
    headers: tuple[tuple[str, str], ...] = ()

    def merged(self, overrides: Mapping[str, Any] | None) -> "ServeDirOptions":
        """Return a copy with *overrides* applied (shallow merge).

        Raises ``ConfigurationError`` for keys that are not option names.
        """
        if not overrides:
            return self
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            msg = f"Unknown static option(s): {', '.join(unknown)}."
            raise ConfigurationError(msg)
        values = dict(overrides)
        if isinstance(values.get("headers"), Mapping):
            values["headers"] = tuple(values["headers"].items())
        return replace(self, **values)


# ------------------------------------------------------------------
# Directory listing
# ------------------------------------------------------------------

_LISTING_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Index of {{ title }}</title>
</head>
<body>
  <h1>Index of {{ title }}</h1>
  <table>
    <tr><th>Name</th><th>Size</th><th>Modified</th></tr>
    {% if parent %}<tr><td><a href="../">../</a></td><td></td><td></td></tr>{% end %}
    {% for entry in entries %}<tr><td><a href="{{ entry.href }}">{{ entry.display_name }}</a></td><td>{{ entry.size_label }}</td><td>{{ entry.modified }}</td></tr>
    {% end %}
  </table>
</body>
</html>
"""


@dataclass(frozen=True, slots=True)
class _ListingEntry:
    display_name: str
    href: str
    size_label: str
    modified: str
    is_dir: bool


@functools.cache
def _listing_template() -> Any:
    env = Environment(autoescape=True)
    return env.from_string(_LISTING_TEMPLATE)


def format_size(size: int) -> str:
    """Human-readable byte count (``"512 B"``, ``"1.5 KB"``)."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


async def _render_listing(directory: anyio.Path, url_path: str, options: ServeDirOptions) -> str:
    entries: list[_ListingEntry] = []
    async for child in directory.iterdir():
        if child.name.startswith(".") and not options.show_dotfiles:
            continue
        try:
            st = await child.stat()
        except OSError:
            # Dangling symlink: list the link itself
            st = await child.lstat()
        is_dir = stat.S_ISDIR(st.st_mode)
        entries.append(
            _ListingEntry(
                display_name=child.name + "/" if is_dir else child.name,
                href=quote(child.name) + ("/" if is_dir else ""),
                size_label="-" if is_dir else format_size(st.st_size),
                modified=formatdate(st.st_mtime, usegmt=True),
                is_dir=is_dir,
            )
        )
    entries.sort(key=lambda e: (not e.is_dir, e.display_name.lower()))
    parent = url_path.rstrip("/") != options.url_root.rstrip("/")
    return _listing_template().render({"title": url_path, "entries": entries, "parent": parent})


# ------------------------------------------------------------------
# Serving
# ------------------------------------------------------------------


def _plain(status: int, body: str) -> Response:
    return Response(status=status, headers=(("Content-Type", _TEXT),), body=body)


def _content_type(path: PurePath) -> str:
    content_type, _ = mimetypes.guess_type(path.name)
    if content_type is None:
        return "application/octet-stream"
    if content_type.startswith("text/"):
        return f"{content_type}; charset=utf-8"
    return content_type


async def _serve_file(file_path: anyio.Path, request: Request) -> Response:
    """Read a file and build a response with validators."""
    st = await file_path.stat()
    etag = f'W/"{st.st_size:x}-{st.st_mtime_ns:x}"'
    headers = (
        ("Content-Type", _content_type(PurePath(str(file_path)))),
        ("ETag", etag),
        ("Last-Modified", formatdate(st.st_mtime, usegmt=True)),
    )

    if_none_match = request.headers.get("if-none-match")
    if if_none_match and etag in (tag.strip() for tag in if_none_match.split(",")):
        return Response(status=304, headers=headers)

    headers = (*headers, ("Content-Length", str(st.st_size)))
    if request.method == "HEAD":
        return Response(status=200, headers=headers)

    body = await file_path.read_bytes()
    return Response(status=200, headers=headers, body=body)


async def _serve(request: Request, options: ServeDirOptions) -> Response:
    if request.method not in ("GET", "HEAD"):
        return _plain(405, "Method Not Allowed").with_header("Allow", "GET, HEAD")

    # Strip the URL root; paths outside it are not ours to serve
    url_root = "/" + options.url_root.strip("/") if options.url_root.strip("/") else ""
    path = request.path
    if url_root and not (path == url_root or path.startswith(url_root + "/")):
        return _plain(404, "Not Found")
    relative = path[len(url_root) :].lstrip("/")
    # NUL bytes cannot name a file
    if "\x00" in relative:
        return _plain(404, "Not Found")

    if not options.show_dotfiles and any(p.startswith(".") for p in relative.split("/") if p):
        return _plain(404, "Not Found")

    root = await anyio.Path(options.fs_root).resolve()
    target = await (root / relative).resolve() if relative else root
    if not PurePath(str(target)).is_relative_to(PurePath(str(root))):
        return _plain(403, "Forbidden")

    if await target.is_dir():
        if not path.endswith("/"):
            return _plain(301, "Moved Permanently").with_header("Location", request.raw_path + "/")
        index = target / "index.html"
        if options.show_index and await index.is_file():
            return await _serve_file(index, request)
        if options.show_dir_listing:
            html = await _render_listing(target, path, options)
            return Response(status=200, headers=(("Content-Type", _HTML),), body=html)
        return _plain(404, "Not Found")

    if not await target.is_file():
        return _plain(404, "Not Found")

    return await _serve_file(target, request)


async def serve_dir(request: Request, options: ServeDirOptions) -> Response:
    """Serve *request* from the directory described by *options*.

    Always returns a response: missing files are 404, traversal attempts
    403, and filesystem errors 500 (logged unless ``options.quiet``).
    """
    try:
        response = await _serve(request, options)
    except OSError:
        if not options.quiet:
            logger.exception("500 %s %s", request.method, request.path)
        response = _plain(500, "Internal Server Error")

    if options.enable_cors:
        response = response.with_headers(dict(CORS_HEADERS))
    for name, value in options.headers:
        response = response.with_header(name, value)

    if not options.quiet:
        logger.info("%d %s %s", response.status, request.method, request.path)
    return response
