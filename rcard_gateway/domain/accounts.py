"""User registration and authentication"""

import logging
import re
from datetime import datetime
from typing import Callable

from rcard_gateway.domain.exceptions import AuthenticationError, ValidationError
from rcard_gateway.domain.models import User
from rcard_gateway.utils.date_utils import utc_now

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6

_TAG_RE = re.compile(r"<[^>]*>")


def sanitize_text(value: str) -> str:
    """Drop NUL bytes and markup tags, trim whitespace"""
    return _TAG_RE.sub("", value.replace("\x00", "")).strip()


class AccountService:
    def __init__(
        self,
        users,
        hash_password: Callable[[str], str],
        verify_password: Callable[[str, str], bool],
        now: Callable[[], datetime] = utc_now,
    ):
        self.users = users
        self.hash_password = hash_password
        self.verify_password = verify_password
        self.now = now

    def register(self, username: str, password: str) -> User:
        username = sanitize_text(username)
        if not username or not password:
            raise ValidationError("Username and password required")
        if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
            raise ValidationError(
                f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
            )
        if len(password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")

        if self.users.get_by_username(username) is not None:
            logger.warning("User creation failed: username taken", extra={"username": username})
            raise ValidationError("Username already exists", reason="username_taken")

        user = self.users.create_user(username, self.hash_password(password), created_at=self.now())
        logger.info("User created", extra={"user_id": user.id, "username": username})
        return user

    def authenticate(self, username: str, password: str) -> User:
        """Verify credentials and stamp last_login"""
        username = sanitize_text(username)
        if not username or not password:
            raise ValidationError("Username and password required")

        user = self.users.get_by_username(username)
        if user is None or not self.verify_password(password, user.password_hash):
            logger.warning("Authentication failed", extra={"username": username})
            raise AuthenticationError("Invalid username or password")

        user.last_login = self.now()
        self.users.save_user(user)
        logger.info("User authenticated", extra={"user_id": user.id})
        return user
