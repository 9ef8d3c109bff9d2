"""
INCIDecoder scraper.

Crawls the INCIDecoder brand index through Firecrawl and turns product
pages into normalized ingredient records.

Run the API with: python -m inci_scraper.main
"""

__version__ = "1.0.0"
