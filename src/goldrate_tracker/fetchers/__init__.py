"""Fetchers for upstream rate sources."""

from goldrate_tracker.fetchers.base import BaseFetcher, FetcherConfig
from goldrate_tracker.fetchers.lombard import LombardRatesFetcher

__all__ = ["BaseFetcher", "FetcherConfig", "LombardRatesFetcher"]
