"""
Purchase webhook - Grant reader access when a payment is approved.

The payment provider posts an event with a shared-secret token (the
"hottok"). A valid PURCHASE_APPROVED event finds or creates the buyer's
account and sets has_access on its profile.

The handler is framework-free: it takes the method, raw body and headers
and returns a WebhookResult. webhook_server.py wraps it in FastAPI.
Every outcome is an HTTP status; nothing raises out of the handler.
"""

import json
import logging
import secrets
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from guidedbook.access.profiles import AccountError, ProfileStore
from guidedbook.schemas import WebhookPayload


logger = logging.getLogger(__name__)

APPROVED_EVENT = "PURCHASE_APPROVED"
AUTH_PREFIXES = ("Bearer ", "Token ")


@dataclass
class WebhookResult:
    status: int
    payload: dict


def new_request_id() -> str:
    return secrets.token_hex(3)


def extract_token(body: Any, headers: Mapping[str, str]) -> tuple[Optional[str], str]:
    """
    Find the shared-secret token in a webhook request.

    Lookup order: body.hottok, body.token, Authorization header,
    X-Hotmart-Hottok header, then the first body key containing
    "token" or "hottok".

    Returns:
        Tuple of (token or None, source description)
    """
    body = body if isinstance(body, dict) else {}
    lowered = {key.lower(): value for key, value in headers.items()}

    if body.get("hottok"):
        return str(body["hottok"]), "body.hottok"
    if body.get("token"):
        return str(body["token"]), "body.token"

    authorization = lowered.get("authorization")
    if authorization:
        for prefix in AUTH_PREFIXES:
            authorization = authorization.removeprefix(prefix)
        return authorization, "header.authorization"

    if lowered.get("x-hotmart-hottok"):
        return lowered["x-hotmart-hottok"], "header.x-hotmart-hottok"

    for key, value in body.items():
        if "token" in key.lower() or "hottok" in key.lower():
            if value is None:
                return None, f"body.{key}"
            return str(value), f"body.{key}"

    return None, "not_found"


def validate_token(received: str, expected: str) -> bool:
    """Compare tokens after trimming whitespace. Case-sensitive."""
    return secrets.compare_digest(received.strip().encode("utf-8"), expected.strip().encode("utf-8"))


def _error(status: int, message: str, request_id: str) -> WebhookResult:
    return WebhookResult(status=status, payload={"error": message, "request_id": request_id})


def handle_purchase_webhook(
    method: str,
    body_text: str,
    headers: Mapping[str, str],
    expected_token: Optional[str],
    profiles: Optional[ProfileStore],
    request_id: Optional[str] = None,
) -> WebhookResult:
    """
    Process one webhook request.

    Args:
        method: HTTP method
        body_text: Raw request body
        headers: Request headers (any case)
        expected_token: Configured shared secret
        profiles: Account/profile store to update
        request_id: Correlation id for log lines (generated if omitted)

    Returns:
        WebhookResult with the HTTP status and JSON payload
    """
    request_id = request_id or new_request_id()
    logger.info(f"[{request_id}] Webhook request: {method}")

    if method.upper() == "OPTIONS":
        return WebhookResult(status=200, payload={"ok": True})

    if method.upper() != "POST":
        return WebhookResult(status=405, payload={"error": "Method Not Allowed"})

    if not expected_token or profiles is None:
        logger.error(f"[{request_id}] Missing webhook configuration")
        return _error(500, "Missing environment variables", request_id)

    logger.info(f"[{request_id}] Raw body length: {len(body_text)}")
    try:
        body = json.loads(body_text)
    except json.JSONDecodeError as e:
        logger.error(f"[{request_id}] JSON parse error: {e}")
        return _error(400, f"Invalid JSON: {e}", request_id)

    received, source = extract_token(body, headers)
    logger.info(f"[{request_id}] Token source: {source}")

    if not received:
        logger.error(f"[{request_id}] Token not found in request")
        return _error(401, "Missing hottok in request", request_id)

    if not validate_token(received, expected_token):
        logger.error(f"[{request_id}] Invalid token")
        return _error(401, "Invalid hottok", request_id)

    try:
        payload = WebhookPayload.model_validate(body)
    except ValidationError as e:
        logger.error(f"[{request_id}] Unexpected payload shape: {e}")
        return _error(400, "Invalid payload", request_id)

    event_type = payload.event
    email = payload.buyer_email
    logger.info(f"[{request_id}] Event: {event_type}, email: {email}")

    if event_type != APPROVED_EVENT:
        logger.info(f"[{request_id}] Ignoring event: {event_type}")
        return WebhookResult(status=200, payload={
            "received": True,
            "message": f"Ignored event: {event_type}",
            "request_id": request_id,
        })

    if not email or not email.strip():
        logger.error(f"[{request_id}] Missing customer email")
        return _error(400, "Missing customer email", request_id)

    try:
        user = profiles.find_user_by_email(email)
        if user is None:
            try:
                user = profiles.create_user(email, full_name=payload.buyer_name)
                logger.info(f"[{request_id}] Created user {user.id}")
            except AccountError:
                logger.info(f"[{request_id}] User already exists, searching again")
                user = profiles.find_user_by_email(email)
                if user is None:
                    raise
        else:
            logger.info(f"[{request_id}] Existing user found: {user.id}")

        profiles.grant_access(user.id)
    except (sqlite3.Error, AccountError) as e:
        logger.error(f"[{request_id}] User processing error: {e}")
        return _error(500, f"Processing failed: {e}", request_id)

    logger.info(f"[{request_id}] User {user.email} now has access")
    return WebhookResult(status=200, payload={
        "received": True,
        "user_id": user.id,
        "email": user.email,
        "access_granted": True,
        "event_type": event_type,
        "processed_at": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id,
    })
