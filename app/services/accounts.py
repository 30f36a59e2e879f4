import logging

from sqlalchemy.orm import Session

from ..config import settings
from ..exceptions import DomainError
from ..models import User, UserRole
from ..security import hash_password, verify_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def authenticate(db: Session, phone: str, password: str) -> User | None:
    user = db.query(User).filter(User.phone == phone.strip()).first()
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.hashed_password):
        raise DomainError("Current password is incorrect")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise DomainError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    user.hashed_password = hash_password(new_password)
    db.commit()
    logger.info("User %s changed their password", user.id)


def ensure_default_admin(db: Session) -> User:
    """Create the configured admin account when no admin exists yet."""
    admin = db.query(User).filter(User.role == UserRole.ADMIN.value).first()
    if admin:
        return admin
    admin = User(
        name=settings.ADMIN_NAME,
        phone=settings.ADMIN_PHONE,
        hashed_password=hash_password(settings.ADMIN_PASSWORD),
        role=UserRole.ADMIN.value,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.warning("Default admin created with phone %s; change its password", admin.phone)
    return admin
