"""Account registration and credential checks."""
import re
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.passwords import hash_password, verify_password
from ..core.exceptions import AuthenticationError, ConflictError, ValidationError
from ..core.logging import get_logger
from ..models import Account, Role
from ..repositories import AccountRepository

logger = get_logger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,30}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_username(username: str) -> str:
    username = (username or "").strip()
    if not 3 <= len(username) <= 30:
        raise ValidationError("Username must be between 3 and 30 characters", details={"field": "username"})
    if not USERNAME_PATTERN.match(username):
        raise ValidationError(
            "Username can only contain letters, numbers, and underscores",
            details={"field": "username"},
        )
    return username


def validate_email(email: str) -> str:
    email = normalize_email(email or "")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Please provide a valid email", details={"field": "email"})
    return email


class AccountService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.accounts = AccountRepository(db)

    async def signup(self, username: str, email: str, password: str, role: Role = Role.USER) -> Account:
        """Create an account; username and email must both be unused."""
        username = validate_username(username)
        email = validate_email(email)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
                details={"field": "password"},
            )

        for existing in await self.accounts.find_by_email_or_username(email, username):
            if existing.email == email:
                raise ConflictError("Email already registered", details={"field": "email"})
            if existing.username == username:
                raise ConflictError("Username already taken", details={"field": "username"})

        account = Account(
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=role,
        )
        return await self.accounts.create(account)

    async def authenticate(self, email: str, password: str) -> Account:
        """Verify credentials. Unknown email and wrong password fail identically."""
        account: Optional[Account] = await self.accounts.get_by_email(normalize_email(email or ""))
        if account is None or not verify_password(password or "", account.password_hash):
            logger.info("login_failed")
            raise AuthenticationError("Invalid email or password")
        logger.info("login_succeeded", account_id=str(account.id))
        return account
