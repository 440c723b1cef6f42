"""
Event Ingestion Package

Site scrapers, LLM-based extraction with scraper fallback, and CSV bulk
import, all producing the same normalized Event records.
"""

from .browser import BrowserManager
from .cost_tracker import CostTracker
from .csv_import import CsvImportService
from .hybrid_extractor import HybridExtractor
from .mistral_extractor import MistralExtractor
from .models import Event, ScraperType
from .normalizer import EventNormalizer
from .scrapers import ScraperFactory, ScraperService

__all__ = [
    "BrowserManager",
    "CostTracker",
    "CsvImportService",
    "Event",
    "EventNormalizer",
    "HybridExtractor",
    "MistralExtractor",
    "ScraperFactory",
    "ScraperService",
    "ScraperType",
]
