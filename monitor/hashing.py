"""
Content hashing for change detection.

The digest is the only equality test used to decide whether a website
changed, so it must be stable across runs and process restarts.
"""

import hashlib

import structlog

logger = structlog.get_logger(__name__)


class ContentHasher:
    """SHA-256 fingerprinting of extracted content."""

    def __init__(self):
        self.logger = logger.bind(component="hasher")

    def hash(self, content: str) -> str:
        """
        Generate SHA-256 hash of content.

        Args:
            content: Extracted page content

        Returns:
            Lowercase hex digest (64 characters)
        """
        content_hash = hashlib.sha256(content.encode('utf-8')).hexdigest()

        self.logger.debug(
            "Generated content hash",
            hash=content_hash[:16] + "...",
            content_length=len(content)
        )

        return content_hash


def calculate_hash(content: str) -> str:
    return hashlib.sha256(content.encode('utf-8')).hexdigest()
