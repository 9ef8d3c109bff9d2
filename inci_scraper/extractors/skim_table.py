"""
Skim-through (ingredient detail) table extraction.

Columns are positional on the site:
    0 ingredient name | 1 what-it-does | 2 irr., com. | 3 ID-Rating

Priority:
1. HTML table with the ``ingredtable`` class
2. "Skim through" markdown section parsed as a pipe table
"""
import re
from typing import List, Optional, Tuple

from inci_scraper.extractors.base import (
    FallbackChain,
    PageContent,
    collapse_whitespace,
    comma_free,
    element_text,
    strip_brackets,
    strip_markdown_links,
)
from inci_scraper.models.product import ID_RATINGS, NOT_RATED, IngredientDetail


RATING_LOOKUP = {label.lower(): label for label in ID_RATINGS}

SKIM_SECTION_RE = re.compile(
    r"Skim through[^\n]*\n+(.*?)(?=\n\s*(?:\[more\]|#)|\Z)",
    re.IGNORECASE | re.DOTALL,
)

# |---|:---:|  (outer pipes optional)
SEPARATOR_ROW_RE = re.compile(r"^\|?\s*:?-{2,}:?\s*(?:\|\s*:?-{2,}:?\s*)*\|?$")


def split_irr_com(text: Optional[str]) -> Tuple[str, str]:
    """
    Split the combined "irr., com." cell.

    >>> split_irr_com("2, 0")
    ('2', '0')
    >>> split_irr_com("3")
    ('3', '-')
    """
    numbers = re.findall(r"\d+", text or "")
    irritancy = numbers[0] if len(numbers) > 0 else NOT_RATED
    comedogenicity = numbers[1] if len(numbers) > 1 else NOT_RATED
    return irritancy, comedogenicity


def normalize_id_rating(text: Optional[str]) -> str:
    """Known rating labels in title case; anything else becomes "-"."""
    return RATING_LOOKUP.get((text or "").strip().lower(), NOT_RATED)


def is_rating_label(text: Optional[str]) -> bool:
    return (text or "").strip().lower() in RATING_LOOKUP


def detail_from_cells(cells: List[str]) -> Optional[IngredientDetail]:
    """
    Map positional cells onto an IngredientDetail.

    A 3-cell row carries either the rating or the irr./com. value in its
    last cell; the known rating labels decide which. Names are stored
    comma-free, matching the overview list.
    """
    if not cells or not cells[0]:
        return None

    name = comma_free(cells[0])
    what_it_does = cells[1] if len(cells) > 1 else ""
    irr_com = ""
    rating = ""

    if len(cells) == 3:
        if is_rating_label(cells[2]):
            rating = cells[2]
        else:
            irr_com = cells[2]
    elif len(cells) >= 4:
        irr_com = cells[2]
        rating = cells[3]

    irritancy, comedogenicity = split_irr_com(irr_com)
    return IngredientDetail(
        name=name,
        what_it_does=what_it_does or NOT_RATED,
        irritancy=irritancy,
        comedogenicity=comedogenicity,
        id_rating=normalize_id_rating(rating),
    )


# =========================================================================
# HTML TABLE
# =========================================================================

def rows_from_html_table(page: PageContent) -> Optional[List[IngredientDetail]]:
    if not page.html:
        return None
    table = page.soup.find("table", class_=re.compile(r"ingredtable"))
    if table is None:
        return None

    rows = []
    for tr in table.find_all("tr"):
        if tr.find("th") is not None:
            continue
        cells = [element_text(td) for td in tr.find_all("td")]
        if any("ingredient name" in cell.lower() for cell in cells):
            continue
        detail = detail_from_cells(cells)
        if detail is not None:
            rows.append(detail)
    return rows


# =========================================================================
# MARKDOWN PIPE TABLE
# =========================================================================

def find_skim_section(markdown: str) -> Optional[str]:
    match = SKIM_SECTION_RE.search(markdown or "")
    if not match:
        return None
    return match.group(1)


def split_pipe_row(row: str) -> List[str]:
    """
    Split a pipe row, keeping blank cells so column positions survive.

    "| Water | solvent | | |" -> ["Water", "solvent", "", ""]
    """
    row = row.strip()
    if row.startswith("|"):
        row = row[1:]
    if row.endswith("|"):
        row = row[:-1]
    return [_clean_markdown_cell(cell) for cell in row.split("|")]


def _clean_markdown_cell(cell: str) -> str:
    text = strip_markdown_links(cell)
    text = re.sub(r"<br\s*/?>", ", ", text, flags=re.IGNORECASE)
    text = strip_brackets(text).replace("\\", "")
    text = collapse_whitespace(text)
    text = re.sub(r"(?:,\s*){2,}", ", ", text)
    return text.strip(" ,")


def rows_from_markdown_table(page: PageContent) -> Optional[List[IngredientDetail]]:
    section = find_skim_section(page.markdown)
    if section is None:
        return None

    rows = []
    for line in section.splitlines():
        line = line.strip()
        if "|" not in line:
            continue
        if SEPARATOR_ROW_RE.match(line):
            continue
        cells = split_pipe_row(line)
        if cells and "ingredient name" in cells[0].lower():
            continue
        detail = detail_from_cells(cells)
        if detail is not None:
            rows.append(detail)
    return rows


SKIM_CHAIN: FallbackChain[List[IngredientDetail]] = FallbackChain(
    "skin_through",
    [
        ("html_ingredtable", rows_from_html_table),
        ("markdown_pipe_table", rows_from_markdown_table),
    ],
    default=[],
)


def extract_skin_through(page: PageContent) -> List[IngredientDetail]:
    return list(SKIM_CHAIN.extract(page) or [])
