"""Site Auditor - crawl a website, score its pages, and extract market insights."""

__version__ = "0.1.0"
