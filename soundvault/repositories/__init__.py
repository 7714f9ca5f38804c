"""Repositories over the document store."""
from .account_repository import AccountRepository
from .track_repository import TrackRepository, visible_to

__all__ = ["AccountRepository", "TrackRepository", "visible_to"]
