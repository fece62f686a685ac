"""
Content extraction for fetched pages.

Narrows a fetched page down to the region a website's selector points at.
A selector that matches nothing, or markup that cannot be parsed, never
aborts a check: the full page is compared instead.
"""

from typing import Optional

import lxml.html
import structlog
from bs4 import BeautifulSoup
from lxml import etree

from monitor.models import Selector, SelectorKind

logger = structlog.get_logger(__name__)


class ContentExtractor:
    """Applies CSS and XPath selectors to raw page text."""

    def __init__(self, parser: str = "html.parser"):
        """
        Args:
            parser: BeautifulSoup tree builder used for CSS selectors
        """
        self.parser = parser
        self.logger = logger.bind(component="extractor")

    def extract(self, raw_text: str, selector: Optional[Selector]) -> str:
        """
        Return the text fragment of interest.

        Args:
            raw_text: Fetched page text
            selector: Resolved selector; None or a full-page selector returns
                the input unchanged

        Returns:
            The extracted fragment, or ``raw_text`` when the selector matches
            nothing or the page cannot be parsed
        """
        if selector is None or selector.kind == SelectorKind.FULL:
            return raw_text

        try:
            if selector.kind == SelectorKind.XPATH:
                fragment = self._apply_xpath(raw_text, selector.expression)
            else:
                fragment = self._apply_css(raw_text, selector.expression)
        except Exception as e:
            self.logger.warning(
                "Failed to apply selector",
                selector=selector.raw,
                kind=selector.kind.value,
                error=str(e)
            )
            return raw_text

        if fragment is None:
            self.logger.warning(
                "Selector matched no elements",
                selector=selector.raw,
                kind=selector.kind.value
            )
            return raw_text

        return fragment

    def _apply_css(self, html: str, expression: str) -> Optional[str]:
        """Inner markup of the first match, else its text. None on a miss."""
        soup = BeautifulSoup(html, self.parser)
        element = soup.select_one(expression)

        if element is None:
            return None

        return element.decode_contents() or element.get_text() or ""

    def _apply_xpath(self, html: str, expression: str) -> Optional[str]:
        """Text content of the first match, else its serialized form. None on a miss."""
        document = lxml.html.document_fromstring(html)
        result = document.xpath(expression)

        # Scalar results (count(), boolean(), ...) select no node
        if not isinstance(result, list) or not result:
            return None

        node = result[0]
        if isinstance(node, etree._Element):
            text = "".join(node.itertext())
            return text or etree.tostring(node, encoding="unicode", method="html", with_tail=False)
        return str(node)


def extract_content(raw_text: str, selector: Optional[Selector]) -> str:
    """Apply a selector with a default extractor."""
    return ContentExtractor().extract(raw_text, selector)
