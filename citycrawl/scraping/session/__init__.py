"""
Automation session exports.
"""

from citycrawl.scraping.session.base import AutomationSession, SessionFactory

__all__ = ["AutomationSession", "SessionFactory"]
