"""
Fingerprint key derivation.

The booking session key is derived from stable signals the client sends with
every request (user agent, screen resolution, timezone). The rolling hash is
deliberately weak: it obfuscates the stored session against casual edits, it
does not keep it secret from anyone who can run code in the browser.
"""
from dataclasses import dataclass
from functools import lru_cache

KEY_LENGTH = 16
_BASE36_DIGITS = '0123456789abcdefghijklmnopqrstuvwxyz'


@dataclass(frozen=True)
class EnvironmentSignals:
    user_agent: str = ''
    screen_width: int = 0
    screen_height: int = 0
    timezone: str = 'UTC'

    @classmethod
    def from_request(cls, request):
        """Build signals from a Flask request's headers."""
        width, height = _parse_resolution(request.headers.get('X-Screen-Resolution', ''))
        return cls(
            user_agent=request.headers.get('User-Agent', ''),
            screen_width=width,
            screen_height=height,
            timezone=request.headers.get('X-Timezone') or 'UTC',
        )

    def fingerprint(self) -> str:
        return f"{self.user_agent}-{self.screen_width}x{self.screen_height}-{self.timezone}"


@dataclass(frozen=True)
class KeyMaterial:
    token: str

    def as_bytes(self) -> bytes:
        return self.token.encode('utf-8')

    def __repr__(self):
        return 'KeyMaterial(<hidden>)'


def _parse_resolution(value: str):
    try:
        width, height = value.lower().split('x', 1)
        return int(width), int(height)
    except ValueError:
        return 0, 0


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _to_base36(value: int) -> str:
    if value == 0:
        return '0'
    sign = '-' if value < 0 else ''
    value = abs(value)
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return sign + ''.join(reversed(digits))


def fingerprint_hash(fingerprint: str) -> int:
    """Rolling multiply-and-add hash (hash * 31 + byte), kept to a signed 32-bit integer."""
    h = 0
    for byte in fingerprint.encode('utf-8'):
        h = _to_int32((h << 5) - h + byte)
    return h


@lru_cache(maxsize=256)
def derive_key(signals: EnvironmentSignals) -> KeyMaterial:
    """Derive the per-environment obfuscation key. Pure; cached per process."""
    token = _to_base36(fingerprint_hash(signals.fingerprint())).rjust(KEY_LENGTH, '0')
    return KeyMaterial(token)
