"""Account repository."""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError
from ..core.logging import get_logger
from ..models import Account, AuthSession, Role

logger = get_logger(__name__)


class AccountRepository:
    """Persistence for :class:`Account` rows. Username and email are unique."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, account: Account) -> Account:
        self.db.add(account)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("account_create_conflict", username=account.username)
            raise ConflictError(message="Username or email already exists") from e
        logger.info("account_created", account_id=str(account.id), role=account.role.value)
        return account

    async def get(self, account_id: UUID) -> Optional[Account]:
        result = await self.db.execute(select(Account).where(Account.id == account_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[Account]:
        result = await self.db.execute(select(Account).where(Account.email == email))
        return result.scalar_one_or_none()

    async def find_by_email_or_username(self, email: str, username: str) -> List[Account]:
        result = await self.db.execute(
            select(Account).where(or_(Account.email == email, Account.username == username))
        )
        return list(result.scalars().all())

    async def find_many(
        self,
        role: Optional[Role] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Account]:
        query = select(Account).order_by(Account.created_at.desc(), Account.id)
        if role is not None:
            query = query.where(Account.role == role)
        query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count(self, role: Optional[Role] = None) -> int:
        query = select(func.count()).select_from(Account)
        if role is not None:
            query = query.where(Account.role == role)
        result = await self.db.execute(query)
        return result.scalar_one()

    async def delete(self, account_id: UUID) -> None:
        """Delete an account together with its login sessions."""
        await self.db.execute(delete(AuthSession).where(AuthSession.account_id == account_id))
        await self.db.execute(delete(Account).where(Account.id == account_id))
        await self.db.commit()
        logger.info("account_deleted", account_id=str(account_id))
