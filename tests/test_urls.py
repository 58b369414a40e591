import unittest

from sitecrawl.errors import InvalidUrl
from sitecrawl.urls import hostname_of, is_asset, normalize_url, robots_url_for


class TestNormalizeUrl(unittest.TestCase):
    def test_strips_trailing_slash(self):
        self.assertEqual(normalize_url("https://example.com/about/"), "https://example.com/about")

    def test_root_path_is_kept(self):
        self.assertEqual(normalize_url("https://example.com/"), "https://example.com/")
        self.assertEqual(normalize_url("https://example.com"), "https://example.com/")

    def test_lowercases_scheme_and_host_only(self):
        self.assertEqual(
            normalize_url("HTTPS://Example.COM/Some/Path"),
            "https://example.com/Some/Path",
        )

    def test_drops_query_when_ignored(self):
        self.assertEqual(normalize_url("https://example.com/p?a=1"), "https://example.com/p")

    def test_keeps_query_when_not_ignored(self):
        self.assertEqual(
            normalize_url("https://example.com/p/?a=1&b=2", ignore_query=False),
            "https://example.com/p?a=1&b=2",
        )

    def test_always_drops_fragment(self):
        self.assertEqual(
            normalize_url("https://example.com/p?a=1#top", ignore_query=False),
            "https://example.com/p?a=1",
        )

    def test_keeps_port(self):
        self.assertEqual(normalize_url("http://Example.com:8080/x/"), "http://example.com:8080/x")

    def test_no_percent_decoding(self):
        self.assertEqual(
            normalize_url("https://example.com/a%20b/"),
            "https://example.com/a%20b",
        )

    def test_ipv6_host(self):
        self.assertEqual(normalize_url("http://[::1]:8000/x/"), "http://[::1]:8000/x")

    def test_idempotent(self):
        samples = [
            "https://example.com",
            "https://Example.com/a/b/",
            "https://example.com/a//",
            "http://example.com:81/?q=1#f",
            "https://example.com/x%2Fy/?z",
        ]
        for ignore_query in (True, False):
            for url in samples:
                once = normalize_url(url, ignore_query)
                self.assertEqual(normalize_url(once, ignore_query), once)

    def test_no_trailing_slash_unless_root(self):
        for url in ["https://example.com/a/", "https://example.com/a/b//", "https://example.com/a?x=/"]:
            result = normalize_url(url, ignore_query=True)
            self.assertFalse(result.endswith("/"), result)

    def test_relative_url_is_invalid(self):
        with self.assertRaises(InvalidUrl):
            normalize_url("/just/a/path")

    def test_bad_port_is_invalid(self):
        with self.assertRaises(InvalidUrl):
            normalize_url("http://example.com:notaport/")

    def test_invalid_url_is_value_error(self):
        with self.assertRaises(ValueError):
            normalize_url("not a url")


class TestUrlHelpers(unittest.TestCase):
    def test_robots_url_for(self):
        self.assertEqual(
            robots_url_for("https://Example.com:8443/deep/page?x=1"),
            "https://example.com:8443/robots.txt",
        )

    def test_robots_url_for_malformed_host(self):
        with self.assertRaises(InvalidUrl):
            robots_url_for("http://[abc/page")

    def test_is_asset_malformed_host(self):
        self.assertFalse(is_asset("http://[abc/logo.png"))

    def test_hostname_of(self):
        self.assertEqual(hostname_of("https://WWW.Example.com/x"), "www.example.com")
        self.assertIsNone(hostname_of("mailto:someone@example.com"))

    def test_is_asset(self):
        self.assertTrue(is_asset("https://example.com/logo.PNG"))
        self.assertFalse(is_asset("https://example.com/about"))
