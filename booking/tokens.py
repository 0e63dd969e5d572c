"""
Session ids, booking references and magic-link tokens.

All randomness comes from the operating system CSPRNG (`secrets` / `uuid4`).
If that source is unavailable, RandomSourceUnavailable is raised; there is no
fallback to `random`.
"""
import hashlib
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime, date
from functools import wraps
from typing import Optional, Union

from config import Config
from booking.exceptions import RandomSourceUnavailable

# No 0/O or 1/I
REFERENCE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
REFERENCE_CODE_LENGTH = 4
MAGIC_TOKEN_BYTES = 32


def _secure_random(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (NotImplementedError, OSError) as exc:
            raise RandomSourceUnavailable(f"Secure random source unavailable: {exc}") from exc
    return wrapper


@dataclass(frozen=True)
class IssuedToken:
    raw_value: str = field(repr=False)
    stored_hash: str
    expires_at: datetime


@_secure_random
def new_session_id() -> str:
    """Generate a random UUID4 session id"""
    return str(uuid.uuid4())


@_secure_random
def new_booking_reference(now: Optional[datetime] = None) -> str:
    """Generate a booking reference such as AR-2026-K7QZ"""
    year = (now or datetime.now()).year
    code = ''.join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_CODE_LENGTH))
    return f"{Config.BOOKING_REFERENCE_PREFIX}-{year}-{code}"


@_secure_random
def new_magic_token() -> str:
    """Generate a 32-byte magic link token as lowercase hex"""
    return secrets.token_hex(MAGIC_TOKEN_BYTES)


def hash_token(raw_token: str) -> str:
    """SHA-256 of the raw token. Only this value is ever stored."""
    return hashlib.sha256(raw_token.encode()).hexdigest()


def _as_datetime(value: Union[datetime, date, str]) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(value)


def compute_expiry(reference: Union[datetime, date, str]) -> datetime:
    """Reference timestamp (e.g. the rental return date) plus the magic-link grace window."""
    return _as_datetime(reference) + Config.MAGIC_LINK_GRACE


def is_expired(timestamp: Union[datetime, date, str], now: Optional[datetime] = None) -> bool:
    expiry = _as_datetime(timestamp)
    if now is None:
        now = datetime.now(expiry.tzinfo)
    return now > expiry


def issue_magic_token(reference: Union[datetime, date, str]) -> IssuedToken:
    """Mint a token, its storage hash and its expiry in one go."""
    raw = new_magic_token()
    return IssuedToken(raw_value=raw, stored_hash=hash_token(raw), expires_at=compute_expiry(reference))
