"""
Caller identity token validation.

The identity provider issues bearer tokens of the form

    <user_id>.<issued_at>.<signature>

where signature = hex(HMAC_SHA256(AUTH_SECRET, "<user_id>.<issued_at>")).

Security features:
- HMAC-SHA256 signature verification (constant-time compare)
- Replay protection via issued_at max age
- Clock skew tolerance for tokens minted slightly in the future
"""

import hashlib
import hmac
import logging
import time

logger = logging.getLogger(__name__)

# Allowed clock skew between identity provider and this service
MAX_CLOCK_SKEW_SECONDS = 60


class IdentityValidationError(Exception):
    """Raised when an identity token fails validation."""
    pass


def _sign(payload: str, secret: str) -> str:
    return hmac.new(
        key=secret.encode('utf-8'),
        msg=payload.encode('utf-8'),
        digestmod=hashlib.sha256
    ).hexdigest()


def issue_token(user_id: str, secret: str, issued_at: int | None = None) -> str:
    """
    Mint a signed identity token (identity provider side, also used by tests).

    Example:
        >>> token = issue_token("user_1", config.AUTH_SECRET)
        >>> validate_identity_token(token, config.AUTH_SECRET)
        'user_1'
    """
    if not user_id or '.' in user_id:
        raise ValueError("user_id must be non-empty and must not contain '.'")
    issued_at = int(time.time()) if issued_at is None else issued_at
    payload = f"{user_id}.{issued_at}"
    return f"{payload}.{_sign(payload, secret)}"


def validate_identity_token(token: str, secret: str, max_age_seconds: int = 3600) -> str:
    """
    Validate a signed identity token and return the caller's user id.

    Args:
        token: Raw token (without the "Bearer " prefix)
        secret: Shared secret with the identity provider
        max_age_seconds: Maximum token age

    Returns:
        The stable user id the token was issued for

    Raises:
        IdentityValidationError: If validation fails
    """
    if not token:
        raise IdentityValidationError("No token provided")

    if not secret:
        raise IdentityValidationError("Auth secret not configured")

    parts = token.split('.')
    if len(parts) != 3:
        raise IdentityValidationError("Malformed token")
    user_id, issued_at_str, received_signature = parts

    if not user_id:
        raise IdentityValidationError("Token has no user id")

    try:
        issued_at = int(issued_at_str)
    except ValueError:
        raise IdentityValidationError("Invalid issued_at")

    age_seconds = time.time() - issued_at
    if age_seconds > max_age_seconds:
        raise IdentityValidationError(
            f"Token too old ({int(age_seconds)}s > {max_age_seconds}s max)"
        )

    if age_seconds < -MAX_CLOCK_SKEW_SECONDS:
        raise IdentityValidationError("Token issued_at is in the future")

    expected_signature = _sign(f"{user_id}.{issued_at_str}", secret)
    if not hmac.compare_digest(expected_signature, received_signature):
        logger.warning(
            f"Identity signature mismatch | "
            f"Expected: {expected_signature[:16]}... | "
            f"Received: {received_signature[:16]}..."
        )
        raise IdentityValidationError("Invalid signature")

    return user_id


def extract_bearer_token(authorization_header: str | None) -> str | None:
    """Return the token part of an 'Authorization: Bearer <token>' header."""
    if not authorization_header:
        return None
    scheme, _, token = authorization_header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()
