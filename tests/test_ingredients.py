"""
Tests for the ingredients overview list extractor.
"""
from inci_scraper.extractors.base import NAME_COMMA, PageContent
from inci_scraper.extractors.ingredients import (
    extract_overview_names,
    find_overview_section,
    join_overview,
    names_from_text,
    parse_overview_section,
)


PLAIN_OVERVIEW = """## Ingredients overview

Aqua, Glycerin, [Cetearyl Alcohol](#), \\[more\\]moreAcrylates/C10-30 Alkyl Acrylate Crosspolymer,
Phenoxyethanol, Sodium Hydroxide [less](#)

Save to list

## Key Ingredients
"""


class TestFindOverviewSection:

    def test_stops_at_read_more(self, product_page):
        section = find_overview_section(product_page.markdown)
        assert section.startswith("[Water]")
        assert "Read more" not in section
        assert "Highlights" not in section

    def test_stops_at_save_to_list(self):
        section = find_overview_section(PLAIN_OVERVIEW)
        assert "Save to list" not in section
        assert "Key Ingredients" not in section

    def test_stops_at_heading(self):
        markdown = "Ingredients overview\n\nWater, Glycerin\n# Next"
        assert find_overview_section(markdown) == "Water, Glycerin"

    def test_missing_section(self):
        assert find_overview_section("# Just a title") is None


class TestOverviewNames:

    def test_ingredient_links_give_exact_names(self, product_page):
        assert extract_overview_names(product_page) == ["Water", "Niacinamide", "Zinc PCA", "Glycerin"]

    def test_text_fallback_removes_toggles_and_links(self):
        names = extract_overview_names(PageContent(markdown=PLAIN_OVERVIEW))
        assert names == [
            "Aqua",
            "Glycerin",
            "Cetearyl Alcohol",
            "Acrylates/C10-30 Alkyl Acrylate Crosspolymer",
            "Phenoxyethanol",
            "Sodium Hydroxide",
        ]

    def test_glued_toggle_is_split_off(self):
        assert names_from_text("Water, moreAcrylates, lessTalc") == ["Water", "Acrylates", "Talc"]

    def test_words_containing_more_or_less_survive(self):
        assert names_from_text("Colorless Oil, Moreover Extract") == ["Colorless Oil", "Moreover Extract"]

    def test_empty_segments_dropped(self):
        assert names_from_text("Water, , Glycerin,") == ["Water", "Glycerin"]

    def test_no_section_gives_empty_list(self):
        assert extract_overview_names(PageContent(markdown="nothing")) == []


class TestOverviewIdempotence:
    """Re-parsing the normalized overview string yields the same list."""

    def test_text_path(self):
        names = extract_overview_names(PageContent(markdown=PLAIN_OVERVIEW))
        assert parse_overview_section(join_overview(names)) == names

    def test_link_path(self, product_page):
        names = extract_overview_names(product_page)
        assert parse_overview_section(join_overview(names)) == names

    def test_count_matches_joined_string(self):
        names = extract_overview_names(PageContent(markdown=PLAIN_OVERVIEW))
        assert len(join_overview(names).split(",")) == len(names)


class TestCommaInsideName:

    def test_link_name_is_kept_as_one_entry(self):
        section = (
            "[Water](https://incidecoder.com/ingredients/water), "
            "[1,2-Hexanediol](https://incidecoder.com/ingredients/1-2-hexanediol), "
            "[Glycerin](https://incidecoder.com/ingredients/glycerin)"
        )
        names = parse_overview_section(section)

        assert names == ["Water", f"1{NAME_COMMA}2-Hexanediol", "Glycerin"]
        assert len(join_overview(names).split(",")) == 3
        assert parse_overview_section(join_overview(names)) == names
