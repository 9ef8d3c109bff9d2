"""
Ingredients overview list extraction.

The overview is the short comma-separated ingredient summary near the top
of a product page. Names are taken from ingredient-page links when the
section has them (exact names); otherwise the section text is cleaned of
link syntax and "more"/"less" toggles and split on commas.
"""
import re
from typing import List, Optional

from inci_scraper.extractors.base import (
    MARKDOWN_LINK_RE,
    FallbackChain,
    PageContent,
    collapse_whitespace,
    comma_free,
    strip_brackets,
    strip_markdown_links,
)


OVERVIEW_SECTION_RE = re.compile(
    r"Ingredients overview[^\n]*\n+(.*?)"
    r"(?=\n\s*[\[*_]*(?:Read more|Save to list|Highlights)|\n\s*#|\Z)",
    re.IGNORECASE | re.DOTALL,
)

# "more"/"less" expand toggles, also when glued to the next name ("moreAcrylates")
TOGGLE_TOKEN_RE = re.compile(r"(?<![A-Za-z])(?:more|less)+(?![a-z])")

TOGGLE_WORDS = {"more", "less"}


def find_overview_section(markdown: str) -> Optional[str]:
    """Raw markdown between the overview heading and the next section marker."""
    match = OVERVIEW_SECTION_RE.search(markdown or "")
    if not match:
        return None
    return match.group(1).strip() or None


def _clean_name(text: str) -> str:
    return comma_free(collapse_whitespace(strip_brackets(text).replace("\\", "")))


def names_from_ingredient_links(section: str) -> List[str]:
    """
    Link texts of links pointing at ingredient detail pages.

    Commas inside a name are replaced so the joined overview still splits
    into one entry per ingredient.
    """
    names = []
    for text, href in MARKDOWN_LINK_RE.findall(section or ""):
        if "/ingredients/" not in href:
            continue
        name = _clean_name(text)
        if name and name.lower() not in TOGGLE_WORDS:
            names.append(name)
    return names


def names_from_text(section: str) -> List[str]:
    """
    Clean the section text and split it on commas.

    Applying this to its own comma-joined output returns the same list.
    """
    text = strip_markdown_links(section or "")
    text = strip_brackets(text).replace("\\", "")
    text = TOGGLE_TOKEN_RE.sub(" ", text)
    text = collapse_whitespace(text)
    names = [part.strip() for part in text.split(",")]
    return [name for name in names if name]


def parse_overview_section(section: str) -> List[str]:
    """Prefer exact names from ingredient links, else split the cleaned text."""
    names = names_from_ingredient_links(section)
    if names:
        return names
    return names_from_text(section)


def overview_from_links(page: PageContent) -> Optional[List[str]]:
    section = find_overview_section(page.markdown)
    if section is None:
        return None
    return names_from_ingredient_links(section)


def overview_from_text(page: PageContent) -> Optional[List[str]]:
    section = find_overview_section(page.markdown)
    if section is None:
        return None
    return names_from_text(section)


OVERVIEW_CHAIN: FallbackChain[List[str]] = FallbackChain(
    "ingredients_overview",
    [
        ("ingredient_links", overview_from_links),
        ("cleaned_text", overview_from_text),
    ],
    default=[],
)


def extract_overview_names(page: PageContent) -> List[str]:
    return list(OVERVIEW_CHAIN.extract(page) or [])


def join_overview(names: List[str]) -> str:
    """Display form of the overview list; its comma count matches len(names)."""
    return ", ".join(names)
