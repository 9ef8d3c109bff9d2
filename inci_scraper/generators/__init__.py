"""Generators package initialization."""
from inci_scraper.generators.record_normalizer import RecordNormalizer, reconcile_ingredients

__all__ = ["RecordNormalizer", "reconcile_ingredients"]
