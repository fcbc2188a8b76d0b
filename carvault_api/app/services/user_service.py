"""
Business logic for users (the credential store).

Users register with a name, e‑mail and password.  E‑mails are stored
lower‑cased and are unique; the password is kept only as a PBKDF2
hash.  Session tokens are issued by ``core.security`` once
``authenticate`` has accepted a login.
"""

import logging
import sqlite3
import uuid
from typing import Optional

from ..core.clock import to_utc_iso, utc_now
from ..core.db import get_connection
from ..core.exceptions import EmailTakenError, NotFoundError
from ..core.security import hash_password, verify_password
from ..schemas.user import UserCreate, UserRead


logger = logging.getLogger(__name__)

EMAIL_TAKEN_MESSAGE = "User already exists with this email"


def _row_to_user(row: sqlite3.Row) -> UserRead:
    return UserRead(id=row["id"], name=row["name"], email=row["email"], created_at=row["created_at"])


class UserService:
    """Registration, login and lookup of users."""

    @classmethod
    async def register(cls, data: UserCreate) -> UserRead:
        """Create a new user.

        Raises ``EmailTakenError`` if the e‑mail is already registered;
        the ``UNIQUE`` constraint on ``users.email`` backs the lookup
        against concurrent registrations.
        """
        email = data.email.lower()
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if cursor.execute("SELECT id FROM users WHERE email = ?", (email,)).fetchone():
                raise EmailTakenError(EMAIL_TAKEN_MESSAGE)
            user_id = uuid.uuid4().hex
            now = to_utc_iso(utc_now())
            cursor.execute(
                "INSERT INTO users (id, name, email, password, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (user_id, data.name, email, hash_password(data.password), now, now),
            )
            conn.commit()
            row = cursor.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            raise EmailTakenError(EMAIL_TAKEN_MESSAGE) from exc
        finally:
            conn.close()
        logger.info("Registered user %s", user_id)
        return _row_to_user(row)

    @classmethod
    async def authenticate(cls, email: str, password: str) -> Optional[UserRead]:
        """Return the user if the credentials match, otherwise ``None``.

        An unknown e‑mail and a wrong password produce the same result.
        """
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ?", (email.lower(),)
            ).fetchone()
        finally:
            conn.close()
        if row is None or not verify_password(password, row["password"]):
            logger.info("Failed login attempt")
            return None
        return _row_to_user(row)

    @classmethod
    async def get_user(cls, user_id: str) -> UserRead:
        """Retrieve a user by ID or raise ``NotFoundError``."""
        conn = get_connection()
        try:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        finally:
            conn.close()
        if row is None:
            raise NotFoundError("User not found")
        return _row_to_user(row)
