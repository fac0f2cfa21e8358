"""Crawler module for fetching and traversing websites."""

from .crawler import SiteCrawler
from .fetcher import FetcherConfig, PageFetcher, RawResponse, ensure_supported_target

__all__ = ["SiteCrawler", "FetcherConfig", "PageFetcher", "RawResponse", "ensure_supported_target"]
