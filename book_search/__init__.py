"""
Book Search Package.

Extracts per-page text from PDF books into SQLite and serves
case-insensitive snippet search across one or many books over HTTP.
"""

__version__ = "1.0.0"
