"""
Keyed integrity checksum over the canonical session serialization.
"""
import re

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from booking.fingerprint import KeyMaterial

_TAG_RE = re.compile(r'[0-9a-f]{64}')


def _hmac(key: KeyMaterial) -> hmac.HMAC:
    return hmac.HMAC(key.as_bytes(), hashes.SHA256())


def compute_checksum(serialized: str, key: KeyMaterial) -> str:
    """HMAC-SHA-256 of the serialized record, hex encoded."""
    mac = _hmac(key)
    mac.update(serialized.encode('utf-8'))
    return mac.finalize().hex()


def verify_checksum(serialized: str, key: KeyMaterial, tag: str) -> bool:
    """Constant-time check of `tag` against the record; malformed tags fail."""
    if not isinstance(tag, str) or not _TAG_RE.fullmatch(tag):
        return False
    expected = bytes.fromhex(tag)

    mac = _hmac(key)
    mac.update(serialized.encode('utf-8'))
    try:
        mac.verify(expected)
    except InvalidSignature:
        return False
    return True
