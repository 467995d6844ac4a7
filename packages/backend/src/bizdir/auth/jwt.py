"""JWT token creation and verification.

Tokens are stateless: validity is a good signature plus an unexpired
`exp`. There is no revocation list. Deactivating a principal takes
effect through the active-principal check at resolution time.

Claims:
    sub    principal id (uuid string)
    kind   "admin_user" | "agent" | "operator"
    code   agent/operator code, or the role for admin users
    email  principal email
    iat / exp
"""

import enum
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from bizdir.config import settings


class PrincipalKind(str, enum.Enum):
    ADMIN_USER = "admin_user"
    AGENT = "agent"
    OPERATOR = "operator"


class TokenError(Exception):
    """Raised when token verification fails."""


def issue_token(
    kind: PrincipalKind,
    principal_id: str,
    code: str,
    email: str,
    expires_days: Optional[int] = None,
    now: Optional[datetime] = None,
    secret: Optional[str] = None,
) -> str:
    """Create a signed token for a principal, valid for 30 days by default."""
    issued = now or datetime.now(timezone.utc)
    expires = issued + timedelta(
        days=settings.token_expire_days if expires_days is None else expires_days
    )
    payload = {
        "sub": principal_id,
        "kind": kind.value,
        "code": code,
        "email": email,
        "iat": issued,
        "exp": expires,
    }
    return jwt.encode(
        payload, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm
    )


def decode_token(
    token: str,
    kind: Optional[PrincipalKind] = None,
    secret: Optional[str] = None,
) -> dict:
    """Verify and decode a token.

    Returns the payload dict on success.
    Raises TokenError on bad signature, malformed token, expiry or
    (when `kind` is given) a token minted for a different principal kind.
    """
    try:
        payload = jwt.decode(
            token,
            secret or settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub", "kind"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    if kind is not None and payload.get("kind") != kind.value:
        raise TokenError("Token was not issued for this portal")
    return payload


def verify_token(
    token: str,
    kind: Optional[PrincipalKind] = None,
    secret: Optional[str] = None,
) -> Optional[dict]:
    """Like decode_token, but returns None instead of raising."""
    try:
        return decode_token(token, kind=kind, secret=secret)
    except TokenError:
        return None
