"""
GuidedBook Access - Accounts, sessions and purchase-gated access.

This module provides:
- ProfileStore: accounts and reader profiles (has_access, contact data)
- handle_purchase_webhook: grant access on an approved purchase
- LocalSessionProvider / AccessController: sign-in flow and screen selection
"""

from .profiles import (
    AccountError,
    ProfileStore,
    DEFAULT_ACCOUNTS_DB,
    MIN_PASSWORD_LENGTH,
    normalize_email,
    format_phone_number,
    check_new_password,
    hash_password,
    verify_password,
)

from .webhook import (
    WebhookResult,
    APPROVED_EVENT,
    new_request_id,
    extract_token,
    validate_token,
    handle_purchase_webhook,
)

from .session import (
    AuthEvent,
    AuthError,
    Screen,
    Session,
    SessionProvider,
    LocalSessionProvider,
    RecoveryFlag,
    AccessController,
)

__all__ = [
    # Profiles
    "AccountError",
    "ProfileStore",
    "DEFAULT_ACCOUNTS_DB",
    "MIN_PASSWORD_LENGTH",
    "normalize_email",
    "format_phone_number",
    "check_new_password",
    "hash_password",
    "verify_password",
    # Webhook
    "WebhookResult",
    "APPROVED_EVENT",
    "new_request_id",
    "extract_token",
    "validate_token",
    "handle_purchase_webhook",
    # Session
    "AuthEvent",
    "AuthError",
    "Screen",
    "Session",
    "SessionProvider",
    "LocalSessionProvider",
    "RecoveryFlag",
    "AccessController",
]
