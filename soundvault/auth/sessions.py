"""Server-side session store.

The client holds an opaque random token in a cookie; only a keyed digest of
the token is persisted.
"""
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import app_settings
from ..core.logging import get_logger
from ..models import AuthSession
from ..models.base import utcnow

logger = get_logger(__name__)


def _as_aware(value: datetime) -> datetime:
    # SQLite returns naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class SessionStore:
    """Create, resolve and destroy login sessions."""

    def __init__(
        self,
        db: AsyncSession,
        secret: Optional[str] = None,
        max_age_seconds: Optional[int] = None,
        touch_after_seconds: Optional[int] = None,
    ):
        self.db = db
        self._secret = (secret or app_settings.session_secret).encode()
        self.max_age = timedelta(seconds=max_age_seconds or app_settings.session_max_age_seconds)
        self.touch_after = timedelta(
            seconds=touch_after_seconds if touch_after_seconds is not None else app_settings.session_touch_after_seconds
        )

    def _digest(self, token: str) -> str:
        return hmac.new(self._secret, token.encode(), hashlib.sha256).hexdigest()

    async def create(self, account_id: UUID) -> str:
        """Open a session for ``account_id`` and return the client token."""
        token = secrets.token_urlsafe(32)
        now = utcnow()
        self.db.add(
            AuthSession(
                token=self._digest(token),
                account_id=account_id,
                created_at=now,
                last_seen_at=now,
                expires_at=now + self.max_age,
            )
        )
        await self.db.commit()
        logger.info("session_created", account_id=str(account_id))
        return token

    async def resolve(self, token: Optional[str]) -> Optional[UUID]:
        """Return the account id for a live session, or None."""
        if not token:
            return None

        digest = self._digest(token)
        result = await self.db.execute(select(AuthSession).where(AuthSession.token == digest))
        record = result.scalar_one_or_none()
        if record is None:
            return None

        now = utcnow()
        if _as_aware(record.expires_at) <= now:
            await self.db.execute(delete(AuthSession).where(AuthSession.token == digest))
            await self.db.commit()
            logger.info("session_expired", account_id=str(record.account_id))
            return None

        if now - _as_aware(record.last_seen_at) >= self.touch_after:
            record.last_seen_at = now
            await self.db.commit()

        return record.account_id

    async def destroy(self, token: Optional[str]) -> None:
        if not token:
            return
        await self.db.execute(delete(AuthSession).where(AuthSession.token == self._digest(token)))
        await self.db.commit()
        logger.info("session_destroyed")
