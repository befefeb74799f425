"""
Profile store - Accounts and reader profiles in SQLite.

Stores:
- Accounts (email, password hash) in the users table
- Profiles (access flag, full name, phone) in the profiles table

Profiles share the account id. A profile row may exist without a
password (accounts created by the payment webhook set one later via
password recovery).
"""

import hashlib
import logging
import re
import secrets
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

from guidedbook.config import DEFAULT_DATA_DIR
from guidedbook.schemas import Account, Profile


logger = logging.getLogger(__name__)

DEFAULT_ACCOUNTS_DB = DEFAULT_DATA_DIR / "accounts.db"
MIN_PASSWORD_LENGTH = 6
HASH_ITERATIONS = 200_000


class AccountError(ValueError):
    """Account operation rejected (duplicate email, bad credentials, weak password)."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


def format_phone_number(value: str) -> str:
    """Format up to 11 digits as a Brazilian phone number: (11) 98765-4321."""
    digits = re.sub(r"\D", "", value or "")[:11]
    result = ""
    if digits:
        result = f"({digits[:2]}"
    if len(digits) > 2:
        result += f") {digits[2:7]}"
    if len(digits) > 7:
        result += f"-{digits[7:]}"
    return result


def check_new_password(password: str, confirmation: str) -> Optional[str]:
    """
    Validate a new password pair.

    Returns:
        Error message for the reader, or None if the password is acceptable
    """
    if not password:
        return "Por favor, insira uma nova senha."
    if password != confirmation:
        return "As senhas não coincidem."
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"A senha deve ter no mínimo {MIN_PASSWORD_LENGTH} caracteres."
    return None


def hash_password(password: str, salt: Optional[str] = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), HASH_ITERATIONS)
    return f"{salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    salt, _, _digest = stored.partition("$")
    return secrets.compare_digest(hash_password(password, salt), stored)


class ProfileStore:
    """
    SQLite-backed accounts and profiles.

    Database location: ~/.guidedbook/accounts.db
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize store.

        Args:
            db_path: Path to accounts.db (default: ~/.guidedbook/accounts.db)
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_ACCOUNTS_DB
        self._ensure_database()

    def _ensure_database(self):
        """Create database and tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT,
                    full_name TEXT,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS profiles (
                    id TEXT PRIMARY KEY,
                    has_access INTEGER NOT NULL DEFAULT 0,
                    full_name TEXT,
                    phone TEXT,
                    updated_at TEXT NOT NULL
                );
            """)
            conn.commit()
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def find_user_by_email(self, email: str) -> Optional[Account]:
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "SELECT id, email, full_name FROM users WHERE email = ?",
                (normalize_email(email),)
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return Account(id=row["id"], email=row["email"], full_name=row["full_name"])
        finally:
            conn.close()

    def user_exists(self, email: str) -> bool:
        return self.find_user_by_email(email) is not None

    def create_user(
        self,
        email: str,
        password: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> Account:
        """
        Create an account and its (access-less) profile.

        Args:
            email: Sign-in email, stored normalized
            password: Optional password; webhook-created accounts have none
            full_name: Optional display name

        Returns:
            The new account

        Raises:
            AccountError: If the email is already registered
        """
        account = Account(id=str(uuid.uuid4()), email=normalize_email(email), full_name=full_name or None)
        password_hash = hash_password(password) if password else None
        now = datetime.now().isoformat()

        conn = self._get_connection()
        try:
            conn.execute(
                """INSERT INTO users (id, email, password_hash, full_name, created_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (account.id, account.email, password_hash, account.full_name, now)
            )
            conn.execute(
                """INSERT INTO profiles (id, has_access, full_name, phone, updated_at)
                   VALUES (?, 0, ?, NULL, ?)""",
                (account.id, account.full_name, now)
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            raise AccountError(f"User already registered: {account.email}") from e
        finally:
            conn.close()

        logger.info(f"Created account {account.id} for {account.email}")
        return account

    def authenticate(self, email: str, password: str) -> Optional[Account]:
        """Return the account if the password matches, else None."""
        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "SELECT id, email, full_name, password_hash FROM users WHERE email = ?",
                (normalize_email(email),)
            )
            row = cursor.fetchone()
        finally:
            conn.close()

        if row is None or not row["password_hash"]:
            return None
        if not verify_password(password, row["password_hash"]):
            return None
        return Account(id=row["id"], email=row["email"], full_name=row["full_name"])

    def set_password(self, user_id: str, password: str):
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AccountError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters")

        conn = self._get_connection()
        try:
            cursor = conn.execute(
                "UPDATE users SET password_hash = ? WHERE id = ?",
                (hash_password(password), user_id)
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise AccountError(f"Unknown user: {user_id}")
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    def get_profile(self, user_id: str) -> Optional[Profile]:
        """
        Look up a profile.

        Database errors are logged and reported as "no profile".
        """
        try:
            conn = self._get_connection()
            try:
                cursor = conn.execute(
                    "SELECT id, has_access, full_name, phone FROM profiles WHERE id = ?",
                    (user_id,)
                )
                row = cursor.fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Error fetching profile {user_id}: {e}")
            return None

        if row is None:
            return None
        return Profile(
            id=row["id"],
            has_access=bool(row["has_access"]),
            full_name=row["full_name"],
            phone=row["phone"],
        )

    def upsert_profile(self, profile: Profile):
        conn = self._get_connection()
        try:
            conn.execute(
                """INSERT INTO profiles (id, has_access, full_name, phone, updated_at)
                   VALUES (?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                     has_access = excluded.has_access,
                     full_name = excluded.full_name,
                     phone = excluded.phone,
                     updated_at = excluded.updated_at""",
                (profile.id, int(profile.has_access), profile.full_name,
                 profile.phone, datetime.now().isoformat())
            )
            conn.commit()
        finally:
            conn.close()

    def update_contact(self, user_id: str, full_name: Optional[str], phone: Optional[str]):
        """Update name and phone, leaving the access flag alone."""
        conn = self._get_connection()
        try:
            conn.execute(
                """INSERT INTO profiles (id, has_access, full_name, phone, updated_at)
                   VALUES (?, 0, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                     full_name = excluded.full_name,
                     phone = excluded.phone,
                     updated_at = excluded.updated_at""",
                (user_id, full_name or None, phone or None, datetime.now().isoformat())
            )
            conn.commit()
        finally:
            conn.close()

    def grant_access(self, user_id: str):
        """Set has_access for a user, creating the profile row if needed."""
        conn = self._get_connection()
        try:
            conn.execute(
                """INSERT INTO profiles (id, has_access, updated_at)
                   VALUES (?, 1, ?)
                   ON CONFLICT(id) DO UPDATE SET
                     has_access = 1,
                     updated_at = excluded.updated_at""",
                (user_id, datetime.now().isoformat())
            )
            conn.commit()
        finally:
            conn.close()
