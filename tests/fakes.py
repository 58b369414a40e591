"""
In-memory stand-in for requests.Session used across the test suite.
"""
import threading

import requests


def make_response(url, status=200, body="", content_type="text/html; charset=utf-8"):
    resp = requests.Response()
    resp.status_code = status
    resp._content = body.encode("utf-8")
    resp.encoding = "utf-8"
    resp.url = url
    resp.reason = "OK" if status < 400 else "Error"
    resp.headers["Content-Type"] = content_type
    return resp


def page(*hrefs, title="Page"):
    anchors = "".join(f'<a href="{href}">{href}</a>' for href in hrefs)
    return f"<html><head><title>{title}</title></head><body><h1>{title}</h1>{anchors}</body></html>"


class FakeSession:
    """
    Routes map a URL to one of:
      - a body string (200 response)
      - a (status, body) tuple
      - an exception instance, raised on request
      - a list of the above, consumed one per request (the last one repeats)
    Unknown URLs answer 404.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []
        self.headers = {}
        self.max_redirects = 30
        self.closed = False
        self._lock = threading.Lock()

    def calls_to(self, url):
        return [u for u, _ in self.requests if u == url]

    def get(self, url, **kwargs):
        with self._lock:
            self.requests.append((url, kwargs))
            route = self.routes.get(url)
            if isinstance(route, list):
                route = route.pop(0) if len(route) > 1 else route[0]

        if route is None:
            return make_response(url, 404, "not found")
        if isinstance(route, BaseException):
            raise route
        if isinstance(route, tuple):
            status, body = route
            return make_response(url, status, body)
        return make_response(url, 200, route)

    def close(self):
        self.closed = True
