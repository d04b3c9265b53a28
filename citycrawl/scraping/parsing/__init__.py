"""
Parsing layer exports.
"""

from citycrawl.scraping.parsing.html_parsers import DetailPageParser

__all__ = ["DetailPageParser"]
