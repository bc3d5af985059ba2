"""
HTTP source collector for remote vCard collections.

Downloads a vCard collection (for example a CardDAV address book export)
with optional basic authentication and splits it into card records.
Provides retry logic with exponential backoff for transient failures.
"""

from __future__ import annotations

import logging
import time

import requests
from requests.exceptions import RequestException

from cardbook import __version__
from cardbook.config.settings import DEFAULT_HTTP_TIMEOUT
from cardbook.sources.base import SourceError, split_cards

# Retry configuration
MAX_RETRIES = 3
INITIAL_RETRY_DELAY = 1.0  # seconds
MAX_RETRY_DELAY = 30.0  # seconds

USER_AGENT = f"cardbook/{__version__}"

logger = logging.getLogger(__name__)


def decode_body(response: requests.Response) -> str:
    """
    Decode a downloaded collection.

    Card text is read as UTF-8 unless the Content-Type header names
    another charset.
    """
    charset = None
    content_type = response.headers.get("Content-Type", "")
    for part in content_type.split(";")[1:]:
        key, _, value = part.strip().partition("=")
        if key.lower() == "charset" and value:
            charset = value.strip("\"' ")

    try:
        return response.content.decode(charset or "utf-8", errors="replace")
    except LookupError:
        logger.warning(f"Unknown charset {charset!r}, decoding as UTF-8")
        return response.content.decode("utf-8", errors="replace")


class HttpSource:
    """
    Collects raw cards from a single URL.

    Usage:
        source = HttpSource(
            "https://dav.example.com/addressbooks/me/default/?export",
            username="me",
            password="secret",
        )
        records = source.fetch_raw_records()
    """

    def __init__(
        self,
        url: str,
        username: str | None = None,
        password: str | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        max_retries: int = MAX_RETRIES,
    ):
        if not url.startswith(("http://", "https://")):
            raise SourceError(f"Invalid source URL scheme: {url}")

        self.url = url
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self._auth = (username, password or "") if username else None

    def __repr__(self) -> str:
        # Credentials stay out of logs
        return f"HttpSource({self.url!r})"

    def _download(self) -> str:
        delay = INITIAL_RETRY_DELAY

        for attempt in range(self.max_retries):
            try:
                logger.debug(
                    f"Downloading cards from {self.url} "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                response = requests.get(
                    self.url,
                    auth=self._auth,
                    timeout=self.timeout,
                    headers={"User-Agent": USER_AGENT, "Accept": "text/vcard"},
                )
                response.raise_for_status()
                return decode_body(response)

            except requests.HTTPError as e:
                status_code = e.response.status_code if e.response is not None else None

                # Retry on server errors only
                if status_code and status_code >= 500 and attempt < self.max_retries - 1:
                    logger.warning(
                        f"Server error ({status_code}) fetching cards, "
                        f"retrying in {delay:.1f}s"
                    )
                    time.sleep(delay)
                    delay = min(delay * 2, MAX_RETRY_DELAY)
                    continue

                raise SourceError(f"Failed to fetch cards from {self.url}: {e}") from e

            except (requests.Timeout, requests.ConnectionError) as e:
                if attempt < self.max_retries - 1:
                    logger.warning(
                        f"Network error fetching cards ({e.__class__.__name__}), "
                        f"retrying in {delay:.1f}s"
                    )
                    time.sleep(delay)
                    delay = min(delay * 2, MAX_RETRY_DELAY)
                    continue

                raise SourceError(
                    f"Failed to fetch cards from {self.url} "
                    f"after {self.max_retries} attempts: {e}"
                ) from e

            except RequestException as e:
                raise SourceError(f"Failed to fetch cards from {self.url}: {e}") from e

        # Unreachable while max_retries >= 1
        raise SourceError(f"Failed to fetch cards from {self.url}")

    def fetch_raw_records(self) -> list[str]:
        """
        Download the collection and split it into records.

        Raises:
            SourceError: On client errors, or after retries are exhausted
        """
        records = split_cards(self._download())
        logger.debug(f"{len(records)} raw card(s) downloaded from {self.url}")
        return records
