"""FastAPI dependencies for the authentication and authorization gates."""
from typing import Callable, Optional

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import app_settings
from ..core.database import get_db
from ..core.exceptions import AuthenticationError, ForbiddenError
from ..core.logging import get_logger
from ..models import Account
from ..repositories import AccountRepository
from .permissions import Capability, has_capability
from .sessions import SessionStore

logger = get_logger(__name__)


def get_session_token(request: Request) -> Optional[str]:
    return request.cookies.get(app_settings.session_cookie_name)


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=app_settings.session_cookie_name,
        value=token,
        max_age=app_settings.session_max_age_seconds,
        httponly=True,
        secure=app_settings.secure_cookies,
        samesite="strict",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=app_settings.session_cookie_name,
        httponly=True,
        secure=app_settings.secure_cookies,
        samesite="strict",
    )


async def get_current_account(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Account:
    """Resolve the session cookie to an account or reject the request."""
    token = get_session_token(request)
    sessions = SessionStore(db)

    account_id = await sessions.resolve(token)
    if account_id is None:
        raise AuthenticationError("Not authenticated. Please login.")

    account = await AccountRepository(db).get(account_id)
    if account is None:
        await sessions.destroy(token)
        logger.warning("session_account_missing", account_id=str(account_id))
        raise AuthenticationError("User not found. Please login again.")

    return account


def require_capability(capability: Capability) -> Callable:
    """Build a dependency that admits only accounts holding ``capability``."""

    async def dependency(account: Account = Depends(get_current_account)) -> Account:
        if not has_capability(account.role, capability):
            logger.warning(
                "capability_denied",
                account_id=str(account.id),
                capability=capability.value,
            )
            raise ForbiddenError("Access denied. Admin privileges required.")
        return account

    return dependency
