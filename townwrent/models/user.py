"""
Accounts. A user is only an identity; name, phone and avatar live on the profile.
"""

from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship
from townwrent.config import settings
from townwrent.database import Base
from passlib.context import CryptContext
from email_validator import validate_email, EmailNotValidError
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from townwrent.models.profile import Profile

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def normalize_email(email: str) -> str:
    """
    Raises:
        ValueError: If the address is not a valid e-mail
    """
    try:
        return validate_email(email.strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError as e:
        raise ValueError(f"Invalid email format: {e}")


def hash_password(password: str) -> str:
    """
    Raises:
        ValueError: If the password is shorter than the configured minimum
    """
    if not password or len(password) < settings.min_password_length:
        raise ValueError(f"Password must be at least {settings.min_password_length} characters long")
    return pwd_context.hash(password)


class User(Base):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Shares the user's id
    profile: Mapped[Optional["Profile"]] = relationship(
        "Profile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"

    @property
    def full_name(self) -> Optional[str]:
        return self.profile.full_name if self.profile else None

    def verify_password(self, password: str) -> bool:
        return pwd_context.verify(password, self.hashed_password)
