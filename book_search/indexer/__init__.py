"""
Indexer module for orchestrating book text extraction.

Coordinates PDF extraction and persistence of per-page text so
books become searchable.
"""

from .pipeline import ExtractionPipeline, ExtractionOutcome, ExtractionStats

__all__ = [
    "ExtractionPipeline",
    "ExtractionOutcome",
    "ExtractionStats"
]
