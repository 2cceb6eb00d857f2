"""Weather Warning Client - Imperative Shell.

This module fetches the weather warning page over HTTP and scrapes the
warning cards into raw records. All I/O is contained here; validation and
dedup are in the core module.
"""

import logging
import re
from typing import Any

import requests
from bs4 import BeautifulSoup, Tag


logger = logging.getLogger(__name__)


# Default timeout for page requests (seconds)
DEFAULT_TIMEOUT = 30

USER_AGENT = "stormrelay/0.1 (+mesh weather relay)"

TYPE_CLASS_PREFIX = "warning-type-"
SEVERITY_CLASS_PREFIX = "sev-"

# "Štart: 2026-06-01 14:00" -> "2026-06-01 14:00"
_TIME_LABEL = re.compile(r"^\s*\w+:\s+")


def _class_value(classes: list[str], prefix: str) -> str:
    """Return the suffix of the first class starting with prefix.

    Raises:
        ValueError: If no class has the prefix
    """
    for name in classes:
        if name.startswith(prefix):
            return name[len(prefix):]
    raise ValueError(f"No class with prefix {prefix!r}")


def _parse_times(title: str) -> tuple[str, str]:
    """Split the times tooltip into start and end, without their labels."""
    lines = [_TIME_LABEL.sub("", line).strip() for line in title.splitlines()]
    lines = [line for line in lines if line]
    if len(lines) < 2:
        raise ValueError(f"Expected start and end time, got {title!r}")
    return lines[0], lines[1]


def extract_warning(card: Tag) -> dict[str, Any]:
    """Extract a raw warning record from one warning card.

    Raises:
        ValueError: If the card is missing an expected element
    """
    glyph = card.select_one(".warning-logos > .glyph")
    title = card.select_one(".warning-heading .title")
    times = card.select_one(".warning .times")

    if glyph is None or title is None or times is None:
        raise ValueError("Warning card is missing glyph, title or times")

    classes = glyph.get("class") or []
    start_time, end_time = _parse_times(times.get("title", ""))

    return {
        "type": _class_value(classes, TYPE_CLASS_PREFIX),
        "severity": _class_value(classes, SEVERITY_CLASS_PREFIX),
        "text": title.get_text(strip=True),
        "start_time": start_time,
        "end_time": end_time,
    }


def extract_warnings(html: str, language: str = "sk") -> list[dict[str, Any]]:
    """Extract raw warning records from the warning page.

    Cards that cannot be read are logged and skipped; the rest of the page
    is still returned.

    Args:
        html: Page HTML
        language: Value of the cards' defaultlang attribute

    Returns:
        Raw records in page order
    """
    soup = BeautifulSoup(html, "html.parser")
    records = []

    for card in soup.select(f'.warning-wrapper[defaultlang="{language}"]'):
        try:
            records.append(extract_warning(card))
        except ValueError as e:
            logger.warning("Skipping malformed warning card: %s", e)

    return records


class WarningClient:
    """Client for fetching weather warnings from the warning page.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        url: str,
        language: str = "sk",
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize warning client.

        Args:
            url: Warning page URL
            language: Language variant of the warning cards to read
            timeout: Request timeout in seconds
        """
        self.url = url
        self.language = language
        self.timeout = timeout

    def fetch_warnings(self) -> list[dict[str, Any]]:
        """Fetch and scrape the current warnings.

        This method performs HTTP I/O.

        Returns:
            Raw warning records in page order

        Raises:
            requests.RequestException: If the request fails
        """
        response = requests.get(
            self.url,
            timeout=self.timeout,
            headers={"User-Agent": USER_AGENT},
        )
        response.raise_for_status()

        logger.debug("Downloaded %d bytes from %s", len(response.content), self.url)

        records = extract_warnings(response.text, self.language)

        logger.info("Scraped %d warnings", len(records))

        return records
