"""
API module exposing the Book Search service over HTTP.

Sits on top of the database, indexer and search modules.
"""

from .app import create_app

__all__ = [
    "create_app"
]
