# tests/test_settings.py

"""Tests for the Settings configuration class."""

import unittest
from pathlib import Path

from productlens.config.settings import Settings


class TestSettings(unittest.TestCase):
    """Verify Settings constants."""

    def test_request_delay_is_positive_float(self) -> None:
        """REQUEST_DELAY must be a positive number."""
        self.assertIsInstance(Settings.REQUEST_DELAY, float)
        self.assertGreater(Settings.REQUEST_DELAY, 0)

    def test_request_timeout_is_positive_int(self) -> None:
        """REQUEST_TIMEOUT must be a positive integer."""
        self.assertIsInstance(Settings.REQUEST_TIMEOUT, int)
        self.assertGreater(Settings.REQUEST_TIMEOUT, 0)

    def test_max_retries_is_positive(self) -> None:
        """MAX_RETRIES must be >= 1."""
        self.assertGreaterEqual(Settings.MAX_RETRIES, 1)

    def test_delay_multiplier_at_least_one(self) -> None:
        """MAX_DELAY_MULTIPLIER must not shrink the base delay."""
        self.assertGreaterEqual(Settings.MAX_DELAY_MULTIPLIER, 1)

    def test_alert_threshold_is_ten_percent(self) -> None:
        """Price alerts fire on a 10% move."""
        self.assertAlmostEqual(Settings.PRICE_ALERT_THRESHOLD, 0.10)

    def test_retention_is_thirty_days(self) -> None:
        """Price history keeps 30 days of observations."""
        self.assertEqual(Settings.PRICE_HISTORY_RETENTION_DAYS, 30)

    def test_history_key_prefix(self) -> None:
        """History keys use the price_history_ prefix."""
        self.assertEqual(
            Settings.PRICE_HISTORY_KEY_PREFIX, "price_history_"
        )

    def test_path_constants_are_paths(self) -> None:
        """Path-typed settings are Path instances."""
        self.assertIsInstance(Settings.BASE_DIR, Path)
        self.assertIsInstance(Settings.LOGS_DIR, Path)
        self.assertIsInstance(Settings.STORE_PATH, Path)

    def test_impersonate_browser_is_string(self) -> None:
        """IMPERSONATE_BROWSER must be a non-empty string."""
        self.assertIsInstance(
            Settings.IMPERSONATE_BROWSER, str
        )
        self.assertTrue(len(Settings.IMPERSONATE_BROWSER) > 0)

    def test_default_headers_has_accept_language(self) -> None:
        """DEFAULT_HEADERS must include Accept-Language."""
        self.assertIn(
            "Accept-Language", Settings.DEFAULT_HEADERS
        )

    def test_captcha_keywords_lowercase(self) -> None:
        """Keywords are matched against lowercased page text."""
        for keyword in Settings.CAPTCHA_KEYWORDS:
            with self.subTest(keyword=keyword):
                self.assertEqual(keyword, keyword.lower())


if __name__ == "__main__":
    unittest.main()
