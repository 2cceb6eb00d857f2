"""Forecast Client - Imperative Shell.

This module fetches the daily forecast page and scrapes its text.
"""

import logging

import requests
from bs4 import BeautifulSoup, Comment

from stormrelay.core.segmenter import fold_diacritics, normalize_whitespace


logger = logging.getLogger(__name__)


# Default timeout for page requests (seconds)
DEFAULT_TIMEOUT = 30

USER_AGENT = "stormrelay/0.1 (+mesh weather relay)"

FORECAST_SELECTOR = ".mp-section"


def extract_forecast(html: str, fold: bool = True) -> str:
    """Extract the forecast text from the forecast page.

    The section's own text nodes hold the synoptic situation and its first
    paragraph holds the forecast; both are joined into one line.

    Args:
        html: Page HTML
        fold: Strip diacritics from the result

    Returns:
        Forecast text, or "" if the page has no forecast section
    """
    soup = BeautifulSoup(html, "html.parser")
    section = soup.select_one(FORECAST_SELECTOR)
    if section is None:
        logger.warning("Forecast section %s not found", FORECAST_SELECTOR)
        return ""

    situation = "".join(
        str(node)
        for node in section.find_all(string=True, recursive=False)
        if not isinstance(node, Comment)
    )
    paragraph = section.find("p")
    forecast = paragraph.get_text() if paragraph is not None else ""

    text = normalize_whitespace(f"{situation} {forecast}")
    if fold:
        text = fold_diacritics(text)
    return text


class ForecastClient:
    """Client for fetching the daily forecast text.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        url: str,
        fold_diacritics: bool = True,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize forecast client.

        Args:
            url: Forecast page URL
            fold_diacritics: Strip diacritics from the scraped text
            timeout: Request timeout in seconds
        """
        self.url = url
        self.fold_diacritics = fold_diacritics
        self.timeout = timeout

    def fetch_forecast(self) -> str:
        """Fetch and scrape the forecast.

        This method performs HTTP I/O.

        Returns:
            Forecast text (may be empty)

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

        return extract_forecast(response.text, self.fold_diacritics)
