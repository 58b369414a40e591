import unittest

import requests

from sitecrawl.robots import AllowAll, ParsedRules, RobotsChecker, rules_allow
from tests.fakes import FakeSession

ROBOTS_URL = "https://example.com/robots.txt"
ROBOTS_TXT = """
User-agent: *
Disallow: /private

User-agent: GreedyBot
Disallow: /
"""


class TestRobotsChecker(unittest.TestCase):
    def test_parsed_rules_deny_and_allow(self):
        session = FakeSession({ROBOTS_URL: ROBOTS_TXT})
        checker = RobotsChecker(session, "SiteAuditBot/1.0")

        self.assertTrue(checker.is_allowed("https://example.com/public"))
        self.assertFalse(checker.is_allowed("https://example.com/private/page"))
        self.assertIsInstance(checker.cache[ROBOTS_URL], ParsedRules)

    def test_rules_depend_on_user_agent(self):
        session = FakeSession({ROBOTS_URL: ROBOTS_TXT})
        checker = RobotsChecker(session, "GreedyBot/2.0")
        self.assertFalse(checker.is_allowed("https://example.com/public"))

    def test_robots_fetched_once_per_host(self):
        session = FakeSession({ROBOTS_URL: ROBOTS_TXT})
        checker = RobotsChecker(session, "SiteAuditBot/1.0")
        for path in ("/a", "/b", "/private"):
            checker.is_allowed(f"https://example.com{path}")
        checker.is_allowed("https://other.org/x")

        self.assertEqual(len(session.calls_to(ROBOTS_URL)), 1)
        self.assertEqual(len(session.calls_to("https://other.org/robots.txt")), 1)
        self.assertEqual(set(checker.cache), {ROBOTS_URL, "https://other.org/robots.txt"})

    def test_missing_robots_allows_everything(self):
        session = FakeSession()
        checker = RobotsChecker(session, "SiteAuditBot/1.0")

        self.assertTrue(checker.is_allowed("https://example.com/private"))
        self.assertIsInstance(checker.cache[ROBOTS_URL], AllowAll)

    def test_network_error_allows_everything(self):
        session = FakeSession({ROBOTS_URL: requests.ConnectionError("refused")})
        checker = RobotsChecker(session, "SiteAuditBot/1.0")

        self.assertTrue(checker.is_allowed("https://example.com/anything"))
        self.assertTrue(checker.is_allowed("https://example.com/else"))
        self.assertEqual(checker.cache[ROBOTS_URL].reason, "refused")
        self.assertEqual(len(session.calls_to(ROBOTS_URL)), 1)

    def test_robots_request_uses_short_timeout_and_agent(self):
        session = FakeSession({ROBOTS_URL: ROBOTS_TXT})
        checker = RobotsChecker(session, "SiteAuditBot/1.0", timeout=5.0)
        checker.is_allowed("https://example.com/")

        _, kwargs = session.requests[0]
        self.assertEqual(kwargs["timeout"], 5.0)
        self.assertEqual(kwargs["headers"]["User-Agent"], "SiteAuditBot/1.0")

    def test_relative_url_never_raises(self):
        checker = RobotsChecker(FakeSession(), "SiteAuditBot/1.0")
        self.assertTrue(checker.is_allowed("/relative"))

    def test_malformed_url_never_raises(self):
        session = FakeSession()
        checker = RobotsChecker(session, "SiteAuditBot/1.0")
        self.assertTrue(checker.is_allowed("http://[abc/page"))
        self.assertEqual(session.requests, [])


class TestRulesAllow(unittest.TestCase):
    def test_allow_all(self):
        self.assertTrue(rules_allow(AllowAll(ROBOTS_URL), "https://example.com/x", "any"))

    def test_unknown_ruleset(self):
        with self.assertRaises(TypeError):
            rules_allow(object(), "https://example.com/x", "any")
