"""Account model."""
import enum

from sqlalchemy import Column, String, Enum as SQLEnum

from .base import Base, UUIDMixin, TimestampMixin


class Role(str, enum.Enum):
    """Account role enumeration."""
    USER = "user"
    ADMIN = "admin"


class Account(Base, UUIDMixin, TimestampMixin):
    """A registered user or administrator."""

    __tablename__ = "accounts"

    username = Column(String(30), nullable=False, unique=True, index=True)
    email = Column(String(254), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        SQLEnum(Role, values_callable=lambda roles: [r.value for r in roles], native_enum=False),
        nullable=False,
        default=Role.USER,
        index=True,
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, username='{self.username}', role='{self.role}')>"
