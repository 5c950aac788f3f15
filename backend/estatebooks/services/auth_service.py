# Overview: Service-layer operations for auth; users, password hashing and credential checks.

"""
Authentication Service

WHY: Every ledger row records who created it. Uses bcrypt for password
hashing and validates password strength at creation time.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Minimum 8 characters; upper, lower, digit and special character required
- Session tokens managed separately (see session_service.py)
- Inactive users never authenticate
"""

import re

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import ROLE_VALUES, User
from ..time_utils import utcnow
from ..validation import ValidationError


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str) or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>_\-]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def _bcrypt_rounds() -> int:
    return int(current_app.config.get("BCRYPT_ROUNDS", 12))


def hash_password(password: str) -> str:
    """Validate strength, then hash with bcrypt."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=_bcrypt_rounds())
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt check. Malformed hashes never verify."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_user(
    username: str,
    email: str,
    password: str,
    *,
    name: str | None = None,
    role: str = "employee",
) -> User:
    """
    Create a user with a bcrypt password hash.

    Raises:
        ValidationError: unknown role, blank username/email, or username/email taken
        PasswordValidationError: weak password
    """
    username = (username or "").strip()
    email = (email or "").strip().lower()
    role = (role or "").strip().lower()
    if not username or not email:
        raise ValidationError("username and email are required")
    if role not in ROLE_VALUES:
        raise ValidationError(f"role must be one of: {', '.join(ROLE_VALUES)}")

    existing = db.session.query(User).filter(
        db.or_(User.username == username, User.email == email)
    ).first()
    if existing:
        raise ValidationError("Username or email already exists")

    password_hash = hash_password(password)

    user = User(
        username=username,
        email=email,
        name=(name or username).strip(),
        password_hash=password_hash,
        role=role,
    )
    db.session.add(user)
    db.session.commit()
    return user


def authenticate(username: str, password: str) -> User | None:
    """
    Authenticate by username or email.

    Returns the User and stamps last_login_at on success, None otherwise.
    """
    if not username or not password:
        return None

    login = username.strip()
    user = db.session.query(User).filter(
        db.or_(User.username == login, User.email == login.lower()),
        User.is_active.is_(True),
    ).first()

    if not user:
        return None

    if verify_password(password, user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        return user

    return None


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.created_at.asc(), User.username.asc()).all()
