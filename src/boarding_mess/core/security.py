"""Bearer token helpers.

Accounts are provisioned outside this service; tokens carry the member id as
their subject and are signed with ``SECRET_KEY``.
"""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import jwt

from boarding_mess.core.settings import settings


def create_access_token(member_id: int, extra_claims: dict[str, str] | None = None) -> str:
    """Create JWT access token for member authentication."""
    to_encode: dict[str, object] = {"sub": str(member_id)}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_member_id(token: str) -> int:
    """Return the member id carried by ``token``.

    Raises:
        jose.JWTError: the token is malformed, expired or wrongly signed.
        ValueError: the subject is missing or not an integer.
    """
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    subject = payload.get("sub")
    if subject is None:
        raise ValueError("Token has no subject")
    return int(subject)
