"""Extractors module for turning fetched markup into page records."""

from .markup import MarkupExtractor

__all__ = ["MarkupExtractor"]
