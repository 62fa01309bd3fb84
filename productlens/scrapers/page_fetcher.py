# productlens/scrapers/page_fetcher.py

"""Fetch live product pages for extraction."""

import logging
import time
from typing import Any
from urllib.parse import urlparse

import cloudscraper  # type: ignore[import-untyped]
from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests

from productlens.config.settings import Settings
from productlens.extraction.dom import parse_html

logger = logging.getLogger("productlens.fetcher")


class PageFetcher:
    """Browser-impersonating page fetcher with a cloudscraper fallback.

    Retries transient failures with an adaptive delay that doubles on
    rate limiting and challenge pages, up to
    ``REQUEST_DELAY * MAX_DELAY_MULTIPLIER``.
    """

    # Cloudflare challenge page markers (checked before keyword scan)
    _CF_CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    def __init__(self) -> None:
        self.settings = Settings()
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._current_delay: float = self.settings.REQUEST_DELAY
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    @staticmethod
    def _origin(url: str) -> str:
        """Scheme and host of ``url`` for the Referer header."""
        parsed = urlparse(url)
        return f"{parsed.scheme}://{parsed.netloc}/"

    def _headers(self, url: str) -> dict[str, str]:
        return {
            **self.settings.DEFAULT_HEADERS,
            "Referer": self._origin(url),
        }

    def _validate_text(self, text: str) -> bool:
        """Reject Cloudflare challenge pages and CAPTCHA walls."""
        lower = text.lower()

        for marker in self._CF_CHALLENGE_MARKERS:
            if marker in lower:
                logger.warning(
                    "Cloudflare challenge detected (marker: '%s')",
                    marker,
                )
                return False

        # Keyword scan only applies to pages without real body content
        has_body_content = "<body" in lower and len(text) > 5000
        if not has_body_content:
            for keyword in self.settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    logger.warning(
                        "CAPTCHA keyword '%s' detected", keyword,
                    )
                    return False
        return True

    def _escalate_delay(self) -> None:
        """Double the current delay up to the configured max."""
        max_delay = (
            self.settings.REQUEST_DELAY
            * self.settings.MAX_DELAY_MULTIPLIER
        )
        self._current_delay = min(self._current_delay * 2, max_delay)
        logger.warning(
            "Rate-limited, delay escalated to %.1fs",
            self._current_delay,
        )

    def _fetch_primary(self, url: str) -> str | None:
        """GET with retries and adaptive delay via curl_cffi."""
        headers = self._headers(url)
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = self.session.get(
                    url,
                    headers=headers,
                    timeout=self._request_timeout,
                )
                if resp.status_code == 200:
                    if not self._validate_text(resp.text):
                        self._escalate_delay()
                        time.sleep(self._current_delay)
                        continue
                    self._current_delay = self.settings.REQUEST_DELAY
                    return resp.text
                logger.warning(
                    "HTTP %d for %s on attempt %d",
                    resp.status_code,
                    url,
                    attempt + 1,
                )
                if resp.status_code in (429, 403):
                    self._escalate_delay()
                    time.sleep(self._current_delay)
            except Exception as exc:
                logger.warning(
                    "Request error for %s on attempt %d: %s",
                    url,
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
                time.sleep(self._current_delay * (attempt + 1))
        return None

    def _fetch_cloudscraper(self, url: str) -> str | None:
        """Single GET through cloudscraper's JS challenge solver."""
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            resp: Any = scraper.get(
                url,
                headers=self._headers(url),
                timeout=self._request_timeout,
            )
            if resp.status_code == 200:
                text = str(resp.text)
                if self._validate_text(text):
                    return text
            else:
                logger.warning(
                    "cloudscraper HTTP %d for %s", resp.status_code, url,
                )
        except Exception as exc:
            logger.error(
                "cloudscraper fallback failed for %s: %s",
                url,
                exc,
                exc_info=True,
            )
        return None

    def fetch_html(self, url: str) -> str | None:
        """Return the page HTML, or ``None`` if every attempt failed."""
        text = self._fetch_primary(url)
        if text is not None:
            return text

        logger.info(
            "curl_cffi exhausted for %s, falling back to cloudscraper",
            url,
        )
        return self._fetch_cloudscraper(url)

    def fetch(self, url: str) -> BeautifulSoup | None:
        """Fetch and parse a page."""
        html = self.fetch_html(url)
        return parse_html(html) if html is not None else None
