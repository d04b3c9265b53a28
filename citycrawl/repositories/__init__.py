from citycrawl.repositories.listing_repository import ListingRepository

__all__ = ["ListingRepository"]
