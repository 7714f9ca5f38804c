"""Server-side login session."""
from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid

from .base import Base, utcnow


class AuthSession(Base):
    """Maps an opaque client-held token to an account."""

    __tablename__ = "auth_sessions"

    token = Column(String(128), primary_key=True)
    account_id = Column(Uuid, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_seen_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<AuthSession(account_id={self.account_id}, expires_at={self.expires_at})>"
