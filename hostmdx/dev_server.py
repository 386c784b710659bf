"""Development HTTP server for the generated output tree."""

import functools
import io
import os
import posixpath
import threading
import urllib.parse
from http import HTTPStatus
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

from .errors import ServerError
from .hooks import HookSet
from .session import log

INDEX_DOCUMENT = "index.html"
NOT_FOUND_DOCUMENT = "404.html"
NOT_FOUND_BODY = b"404 Invalid url not found!"
DEFAULT_CONTENT_TYPE = "text/plain"
MIME_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".ico": "image/x-icon",
    ".wav": "audio/wav",
    ".webp": "image/webp",
    ".mp3": "audio/mpeg",
    ".mp4": "video/mp4",
    ".svg": "image/svg+xml",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".xml": "application/xml",
    ".zip": "application/zip",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
}


def sanitize_url_path(url_path):
    """Decode a request target into a normalized absolute posix path.

    Leading ``..`` segments collapse at ``/`` so the result never climbs
    above the served root.
    """
    path = urllib.parse.urlsplit(url_path).path
    path = urllib.parse.unquote(path).replace("\\", "/")
    trailing = path.endswith("/")
    path = posixpath.normpath("/" + path.lstrip("/"))
    if trailing and path != "/":
        path += "/"
    return path


def resolve_served_file(output_root, url_path):
    """Map a request path to a file path under *output_root*.

    Returns ``(path, is_directory)``; *path* is None when the request resolves
    outside the root (through a symlink, for instance) or cannot name a file.
    """
    clean = sanitize_url_path(url_path)
    is_directory = not posixpath.splitext(clean.rstrip("/"))[1]
    if "\x00" in clean:
        return None, is_directory
    relative = clean.lstrip("/")
    if is_directory:
        relative = posixpath.join(relative, INDEX_DOCUMENT)
    root = Path(output_root).resolve()
    candidate = (root / relative).resolve()
    try:
        candidate.relative_to(root)
    except ValueError:
        return None, is_directory
    return candidate, is_directory


class DevRequestHandler(SimpleHTTPRequestHandler):
    def guess_type(self, path):
        return MIME_TYPES.get(posixpath.splitext(str(path))[1].lower(), DEFAULT_CONTENT_TYPE)

    def _send_body(self, status, body, content_type):
        self.send_response(status)
        self.send_header("Content-type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        return io.BytesIO(body)

    def send_head(self):
        target, is_directory = resolve_served_file(self.directory, self.path)
        if target is not None and target.is_file():
            try:
                fp = open(target, "rb")
            except OSError as exc:
                return self._send_body(
                    HTTPStatus.INTERNAL_SERVER_ERROR,
                    f"Error getting the file: {exc}.".encode("utf-8"),
                    DEFAULT_CONTENT_TYPE,
                )
            size = os.fstat(fp.fileno()).st_size
            self.send_response(HTTPStatus.OK)
            self.send_header("Content-type", self.guess_type(target))
            self.send_header("Content-Length", str(size))
            self.end_headers()
            return fp
        parts = urllib.parse.urlsplit(self.path)
        if is_directory and not parts.path.endswith("/"):
            location = urllib.parse.urlunsplit(
                ("", "", parts.path + "/", parts.query, parts.fragment)
            )
            self.send_response(HTTPStatus.MOVED_PERMANENTLY)
            self.send_header("Location", location)
            self.send_header("Content-Length", "0")
            self.end_headers()
            return None
        not_found = Path(self.directory) / NOT_FOUND_DOCUMENT
        try:
            body = not_found.read_bytes()
            content_type = MIME_TYPES[".html"]
        except OSError:
            body = NOT_FOUND_BODY
            content_type = DEFAULT_CONTENT_TYPE
        return self._send_body(HTTPStatus.NOT_FOUND, body, content_type)

    def log_message(self, format, *args):
        log(f"{self.address_string()} {format % args}", verbose_only=True)


class DevHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    # a second server on a busy port must fail rather than share it
    allow_reuse_port = False


class ServerHandle:
    """A running dev server. ``close()`` may be called any number of times."""

    def __init__(self, httpd, thread, hooks):
        self.httpd = httpd
        self.thread = thread
        self.hooks = hooks
        self.port = httpd.server_address[1]
        self._closed = False
        self._lock = threading.Lock()

    @property
    def url(self):
        return f"http://localhost:{self.port}/"

    @property
    def closed(self):
        return self._closed

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self.httpd.shutdown()
        self.httpd.server_close()
        self.thread.join()
        self.hooks.on_host_end(self.port)


def _serve_forever(httpd):
    """Run the HTTP server until shutdown is called."""
    httpd.serve_forever()


def serve(output_root, port, hooks=None, host=""):
    """Serve *output_root* on *port* from a background thread."""
    if hooks is None:
        hooks = HookSet()
    handler = functools.partial(DevRequestHandler, directory=str(output_root))
    try:
        httpd = DevHTTPServer((host, port), handler)
    except OSError as exc:
        log(f"Error Starting server {exc}")
        raise ServerError(f"Could not start server on port {port}: {exc}") from exc
    thread = threading.Thread(
        target=_serve_forever, args=(httpd,), name="hostmdx-server", daemon=True
    )
    thread.start()
    handle = ServerHandle(httpd, thread, hooks)
    hooks.on_host_start(handle.port)
    log(
        f"Server listening at {handle.port} ... (Press 'r' to manually reload,"
        " Press 'Ctrl+c' to exit)"
    )
    return handle
