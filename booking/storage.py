"""
Storage slots for the obfuscated booking session.

A slot holds one text value per key. Backends raise StorageUnavailable when the
medium cannot be read or written; the session store turns that into "no session".
"""
from typing import Optional

from flask import session as flask_session

from booking.exceptions import StorageUnavailable


class MemoryStorage:
    """Dict-backed slot, one per client. Used by tests and scripts."""

    def __init__(self, max_bytes: Optional[int] = None):
        self._items = {}
        self.max_bytes = max_bytes

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        if self.max_bytes is not None and len(value.encode('utf-8')) > self.max_bytes:
            raise StorageUnavailable(f"Storage quota of {self.max_bytes} bytes exceeded")
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class FlaskSessionStorage:
    """
    Slot kept in Flask's client-side session cookie.

    The blob travels with the client, so it is treated as untrusted input on
    every request. Must be used inside a request context.
    """

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        if self._session is not None:
            return self._session
        return flask_session

    def get(self, key: str) -> Optional[str]:
        try:
            return self.session.get(key)
        except RuntimeError as exc:
            raise StorageUnavailable(f"Session storage unavailable: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            self.session[key] = value
            self.session.modified = True
        except RuntimeError as exc:
            raise StorageUnavailable(f"Session storage unavailable: {exc}") from exc

    def remove(self, key: str) -> None:
        try:
            self.session.pop(key, None)
            self.session.modified = True
        except RuntimeError as exc:
            raise StorageUnavailable(f"Session storage unavailable: {exc}") from exc
