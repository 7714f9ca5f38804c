"""
Create the initial admin account.

Usage:
    python -m soundvault.scripts.create_admin

Credentials come from the ADMIN_USERNAME, ADMIN_EMAIL and ADMIN_PASSWORD
settings. Running it again is harmless: an existing admin is reported and
left untouched.
"""
import asyncio
import sys
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import app_settings
from ..core.database import close_db, get_session_factory, init_db
from ..core.logging import configure_logging, get_logger
from ..models import Account, Role
from ..repositories import AccountRepository
from ..services.account_service import AccountService, normalize_email

logger = get_logger(__name__)


async def ensure_admin(
    session: AsyncSession,
    username: Optional[str] = None,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> Tuple[Account, bool]:
    """Return the admin for ``email``, creating it if missing.

    Returns:
        The account and whether it was created by this call
    """
    email = normalize_email(email or app_settings.admin_email)
    existing = await AccountRepository(session).get_by_email(email)
    if existing is not None:
        return existing, False

    account = await AccountService(session).signup(
        username or app_settings.admin_username,
        email,
        password or app_settings.admin_password,
        role=Role.ADMIN,
    )
    return account, True


async def main() -> int:
    configure_logging(log_level=app_settings.log_level, log_format=app_settings.log_format)

    print("\n" + "=" * 60)
    print("SOUNDVAULT - CREATE ADMIN")
    print("=" * 60)

    try:
        await init_db()
        async with get_session_factory()() as session:
            account, created = await ensure_admin(session)

        if created:
            logger.info("admin_created", account_id=str(account.id), email=account.email)
            print(f"\nAdmin user created: {account.username} <{account.email}>")
            print("Change the default password after first login.")
        else:
            print(f"\nAdmin user already exists: {account.username} <{account.email}> (role: {account.role.value})")
        return 0

    except Exception as e:
        logger.error("admin_create_failed", error=str(e), exc_info=True)
        print(f"\nError creating admin user: {e}")
        return 1

    finally:
        await close_db()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
