"""
XOR obfuscation for the client-held booking session.

Not confidentiality: the key is derived from public browser signals. This only
keeps the stored blob opaque to casual inspection; tampering is caught by the
checksum in booking.integrity.
"""
import base64
import binascii
import logging
from itertools import cycle
from typing import Optional

from booking.fingerprint import KeyMaterial

logger = logging.getLogger(__name__)


def _xor(data: bytes, key: bytes) -> bytes:
    if not key:
        raise ValueError("Obfuscation key must not be empty")
    return bytes(b ^ k for b, k in zip(data, cycle(key)))


def obfuscate(plaintext: str, key: KeyMaterial) -> str:
    """XOR the UTF-8 plaintext with the repeating key and return a base64 payload."""
    data = plaintext.encode('utf-8')
    return base64.b64encode(_xor(data, key.as_bytes())).decode('ascii')


def deobfuscate(token: Optional[str], key: KeyMaterial) -> Optional[str]:
    """
    Reverse obfuscate(). Returns None when the payload is not valid base64 or
    does not decode to UTF-8 text, so callers treat it like a missing session.
    """
    if not token:
        return None

    try:
        raw = base64.b64decode(token, validate=True)
        if base64.b64encode(raw).decode('ascii') != token:
            raise ValueError("Non-canonical base64 payload")
        return _xor(raw, key.as_bytes()).decode('utf-8')
    except (binascii.Error, ValueError) as exc:
        # UnicodeDecodeError is a ValueError subclass
        logger.warning("[Obfuscator] Stored session payload unreadable: %s", exc)
        return None
