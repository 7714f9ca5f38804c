"""Database models for SoundVault."""
from .base import Base
from .account import Account, Role
from .track import Track, Visibility
from .session import AuthSession
from .blob import BlobChunk, BlobFile, BlobNamespace

__all__ = [
    "Base",
    "Account",
    "Role",
    "Track",
    "Visibility",
    "AuthSession",
    "BlobChunk",
    "BlobFile",
    "BlobNamespace",
]
