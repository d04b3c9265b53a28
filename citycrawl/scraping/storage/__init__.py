from citycrawl.scraping.storage.base import ListingStorage
from citycrawl.scraping.storage.sqlalchemy_storage import SQLAlchemyListingStorage

__all__ = ["ListingStorage", "SQLAlchemyListingStorage"]
