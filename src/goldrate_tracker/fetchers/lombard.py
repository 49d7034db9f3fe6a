#!/usr/bin/env python3
"""
Fetcher for the pawnshop purity price feed.
The feed is a JSON array of {code, label, price} objects.
"""

import logging
from typing import List, Optional

from goldrate_tracker.config import Config, get_config
from goldrate_tracker.fetchers.base import BaseFetcher, FetcherConfig
from goldrate_tracker.models import RateEntry
from goldrate_tracker.utils.parsing import parse_rate_payload

logger = logging.getLogger(__name__)


class LombardRatesFetcher(BaseFetcher):
    """Fetches purity prices from the upstream JSON endpoint."""

    def __init__(self, config: Optional[FetcherConfig] = None):
        super().__init__(config or fetcher_config_from(get_config()))

    def fetch_rates(self) -> List[RateEntry]:
        """
        Fetch the purity price list.

        Returns:
            Validated entries in upstream order
        """
        data = self._fetch_json(self.config.source_url)
        entries = parse_rate_payload(data)
        logger.info("Fetched %d rate entries: %s", len(entries),
                    ", ".join(f"{e.code}={e.price}" for e in entries))
        return entries


def fetcher_config_from(config: Config) -> FetcherConfig:
    """Build a FetcherConfig from the application settings."""
    return FetcherConfig(
        source_url=config.RATES_SOURCE_URL,
        request_timeout=config.REQUEST_TIMEOUT,
        retry_attempts=config.RETRY_ATTEMPTS,
        retry_backoff=config.RETRY_BACKOFF,
    )
