"""
citycrawl: concurrent multi-city listing scraper.
"""

__version__ = "0.1.0"
