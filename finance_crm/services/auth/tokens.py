"""
Bearer token helpers for locally minted sessions.

Tokens are HS256 JWTs carrying the subject and email, valid for a fixed
window (8 hours by default). The signing secret stays in the process
that mints; it is never sent anywhere.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt


def mint_token(
    email: str,
    secret: str,
    algorithm: str = "HS256",
    ttl_hours: int = 8,
    now: Optional[datetime] = None,
) -> str:
    """Sign a token for `email` valid for `ttl_hours` from `now`."""
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "sub": email,
        "email": email,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=ttl_hours),
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> dict[str, Any]:
    """
    Verify and decode a token.

    Raises:
        jwt.ExpiredSignatureError: If the token is past its expiry
        jwt.InvalidTokenError: For any other verification failure
    """
    return jwt.decode(token, secret, algorithms=[algorithm])


def token_expiry(token: str) -> Optional[datetime]:
    """
    Read the expiry of a token without verifying it.

    For display only; the API remains the authority on validity.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None
    exp = claims.get("exp")
    if exp is None:
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)
