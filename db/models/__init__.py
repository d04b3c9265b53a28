"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.listing import ScrapedListing

__all__ = [
    "ScrapedListing",
]
