from __future__ import annotations

import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlparse

import pytest

from browser_tui.fetcher import PageFetcher

NUMBERED_PAGE = """<!DOCTYPE html>
<html>
<head><title>Page {n}</title></head>
<body>
<h1>Page {n}</h1>
<p>This is page number {n}. Follow the link to the next page.</p>
<p><a href="/numberedPage.html?page={next}">Page {next}</a></p>
</body>
</html>
"""


class NumberedPageHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        parsed = urlparse(self.path)
        if parsed.path != "/numberedPage.html":
            self.send_error(404)
            return
        try:
            n = int(parse_qs(parsed.query).get("page", ["1"])[0])
        except ValueError:
            self.send_error(400)
            return
        body = NUMBERED_PAGE.format(n=n, next=n + 1).encode()
        self.send_response(200)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


class SimplePageServer:
    """Serves numbered pages from a background thread on a free port."""

    def __init__(self):
        self.server = ThreadingHTTPServer(("127.0.0.1", 0), NumberedPageHandler)
        self.thread = threading.Thread(target=self.server.serve_forever, daemon=True)

    @property
    def web_root(self) -> str:
        host, port = self.server.server_address[:2]
        return f"http://{host}:{port}"

    def start(self) -> str:
        self.thread.start()
        return self.web_root

    def stop(self) -> None:
        self.server.shutdown()
        self.server.server_close()


@pytest.fixture
def web_root():
    server = SimplePageServer()
    yield server.start()
    server.stop()


@pytest.fixture
def fetcher():
    f = PageFetcher(attempts=1)
    # The page server is local; keep proxy settings from the environment out of it.
    f.session.trust_env = False
    yield f
    f.close()
