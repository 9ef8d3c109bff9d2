"""
Shared building blocks for the field extractors.

Every field is extracted by a FallbackChain: an ordered list of named
strategies, each a pure function of the page content. The first strategy
returning a non-empty value wins; later strategies are strictly less
reliable fallbacks.
"""
import re
from functools import cached_property
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

from bs4 import BeautifulSoup, Tag

from inci_scraper.utils.logger import LayerLogger


T = TypeVar("T")

# [Text](url) or [Text](url "title")
MARKDOWN_LINK_RE = re.compile(r'\[([^\]]*)\]\(([^)\s]*)(?:\s+"[^"]*")?\)')


class PageContent:
    """Raw captured content of one page, with a lazily parsed soup."""

    def __init__(
        self,
        markdown: str = "",
        html: str = "",
        metadata: Optional[Dict[str, Any]] = None,
        source_url: str = "",
        links: Optional[List[str]] = None,
    ):
        self.markdown = markdown or ""
        self.html = html or ""
        self.metadata = metadata or {}
        self.source_url = source_url
        self.links = links or []

    @classmethod
    def from_rendered(cls, page: Any) -> "PageContent":
        """Build from a fetch client RenderedPage."""
        return cls(
            markdown=page.markdown,
            html=page.html,
            metadata=page.metadata,
            source_url=page.url,
            links=page.links,
        )

    @cached_property
    def soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, "lxml")


Strategy = Callable[[PageContent], Optional[T]]


def is_empty(value: Any) -> bool:
    """None, blank strings and empty collections count as absent."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


class FallbackChain(Generic[T]):
    """
    Ordered strategies for one field.

    Strategies never raise for "not found"; they return None (or an empty
    value). The chain resolves to ``default`` when every strategy is empty.
    """

    def __init__(
        self,
        field: str,
        strategies: Sequence[Tuple[str, Strategy]],
        default: Optional[T] = None,
    ):
        self.field = field
        self.strategies: List[Tuple[str, Strategy]] = list(strategies)
        self.default = default
        self.logger = LayerLogger("extractors")

    def extract(self, page: PageContent) -> Optional[T]:
        value, _ = self.extract_with_source(page)
        return value

    def extract_with_source(self, page: PageContent) -> Tuple[Optional[T], Optional[str]]:
        """Return the value together with the name of the winning strategy."""
        for position, (name, strategy) in enumerate(self.strategies):
            value = strategy(page)
            if not is_empty(value):
                if position > 0:
                    self.logger.log_fallback(
                        from_source=self.strategies[0][0],
                        to_source=name,
                        reason="primary strategy found nothing",
                        field=self.field,
                        url=page.source_url,
                    )
                self.logger.log_extraction(self.field, name, True, url=page.source_url)
                return value, name

        self.logger.log_extraction(self.field, None, False, url=page.source_url)
        return self.default, None


# =========================================================================
# TEXT HELPERS
# =========================================================================

def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def strip_markdown_links(text: str) -> str:
    """``[Text](url)`` -> ``Text``"""
    return MARKDOWN_LINK_RE.sub(r"\1", text or "")


def strip_brackets(text: str) -> str:
    """Remove stray (optionally escaped) square brackets."""
    return re.sub(r"\\?[\[\]]", "", text or "")


def element_text(element: Tag) -> str:
    """
    Text of an HTML element.

    Anchors resolve to their link text, <br> becomes ", ", remaining tags
    are stripped, whitespace and duplicate commas are collapsed.
    """
    for br in element.find_all("br"):
        br.replace_with(", ")
    text = collapse_whitespace(element.get_text(" "))
    text = re.sub(r"\s+,", ",", text)
    text = re.sub(r"(?:,\s*){2,}", ", ", text)
    return text.strip(" ,")


def find_by_id(page: PageContent, element_id: str) -> Optional[Tag]:
    if not page.html:
        return None
    return page.soup.find(id=element_id)


# Stands in for a comma inside an ingredient name ("1,2-Hexanediol") so the
# comma-separated overview splits back into the same names
NAME_COMMA = "‚"


def comma_free(name: str) -> str:
    """``1,2-Hexanediol`` -> ``1‚2-Hexanediol`` (U+201A, not a comma)"""
    return re.sub(r"\s*,\s*", NAME_COMMA, name or "")
