"""
Fetcher package for website change detection.

This package contains:
- Async page fetcher with retry, rate limiting and timeouts
- Content extraction by CSS or XPath selector
- Retry policy and fetch models
"""

__version__ = "1.0.0"
