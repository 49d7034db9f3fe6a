#!/usr/bin/env python3
"""
Base fetcher class for upstream rate sources.
Provides the HTTP session, retries and error handling shared by all sources.
"""

from abc import ABC, abstractmethod
from typing import Any, List
import time
import logging
from dataclasses import dataclass
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from goldrate_tracker.exceptions import FetchError, ValidationError
from goldrate_tracker.models import RateEntry

logger = logging.getLogger(__name__)


@dataclass
class FetcherConfig:
    """Configuration for fetcher behavior"""

    source_url: str
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    request_timeout: int = 15
    retry_attempts: int = 3
    retry_backoff: float = 1.5


class BaseFetcher(ABC):
    """
    Abstract base class for rate fetchers.

    Provides HTTP requests with retries and backoff.
    Subclasses turn the response into validated RateEntry objects.
    """

    def __init__(self, config: FetcherConfig):
        """
        Initialize fetcher with configuration.

        Args:
            config: FetcherConfig instance with fetcher settings
        """
        self.config = config
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create requests session with retry strategy"""
        session = requests.Session()

        # Transport-level retries for connection resets; status retries are handled in _fetch_json
        retry_strategy = Retry(
            total=self.config.retry_attempts,
            backoff_factor=self.config.retry_backoff,
            status_forcelist=[],
            allowed_methods=["GET"],
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update(
            {
                "User-Agent": self.config.user_agent,
                "Accept": "application/json",
                "Connection": "keep-alive",
            }
        )

        return session

    def _backoff(self, attempt: int) -> None:
        if attempt < self.config.retry_attempts:
            backoff_delay = self.config.retry_backoff ** attempt
            logger.debug("Retrying after %.1fs backoff...", backoff_delay)
            time.sleep(backoff_delay)

    def _fetch_json(self, url: str) -> Any:
        """
        Fetch a URL and decode its JSON body, retrying transient failures.

        Args:
            url: URL to fetch

        Returns:
            Decoded JSON body

        Raises:
            FetchError: If the source stays unreachable after all retries
            ValidationError: If the body is not valid JSON
        """
        last_error = None

        for attempt in range(1, self.config.retry_attempts + 1):
            try:
                logger.debug("Fetching: %s (attempt %d/%d)", url, attempt, self.config.retry_attempts)
                response = self.session.get(url, timeout=self.config.request_timeout)
                response.raise_for_status()

                if attempt > 1:
                    logger.info("Successfully fetched %s on attempt %d", url, attempt)

                try:
                    return response.json()
                except ValueError as e:
                    raise ValidationError(f"Invalid JSON from {url}: {e}") from e

            except requests.Timeout:
                last_error = f"Timeout after {self.config.request_timeout}s"
                logger.warning("Attempt %d/%d failed for %s: %s",
                               attempt, self.config.retry_attempts, url, last_error)
                self._backoff(attempt)

            except requests.HTTPError as e:
                status_code = e.response.status_code if e.response is not None else None
                last_error = f"HTTP {status_code}"

                # Don't retry on client errors (4xx except 429)
                if status_code is not None and 400 <= status_code < 500 and status_code != 429:
                    logger.warning("Client error for %s: %s (not retrying)", url, last_error)
                    break

                logger.warning("Attempt %d/%d failed for %s: %s",
                               attempt, self.config.retry_attempts, url, last_error)
                self._backoff(attempt)

            except requests.RequestException as e:
                last_error = f"Connection error: {str(e)[:100]}"
                logger.warning("Attempt %d/%d failed for %s: %s",
                               attempt, self.config.retry_attempts, url, last_error)
                self._backoff(attempt)

        logger.error("Failed to fetch %s after %d attempts. Last error: %s",
                     url, self.config.retry_attempts, last_error)
        raise FetchError(f"Failed to fetch rates from {url}: {last_error or 'Unknown error'}")

    @abstractmethod
    def fetch_rates(self) -> List[RateEntry]:
        """
        Fetch and validate the latest rate entries.

        Must be implemented by subclasses.

        Returns:
            List of validated RateEntry

        Raises:
            FetchError: If the source is unreachable
            ValidationError: If the payload has no usable entries
        """

    def cleanup(self):
        """Clean up resources (close session, etc.)"""
        self.session.close()
        logger.debug("Fetcher session closed")

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.cleanup()
