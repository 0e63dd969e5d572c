"""
Custom exceptions for the booking-session trust layer.
The session store recovers every SessionError except RandomSourceUnavailable.
"""

RESET_MESSAGE = 'Your booking progress was reset, please start again.'


class SessionError(Exception):
    """Base exception for all booking-session errors."""
    pass


class StorageUnavailable(SessionError):
    """Raised when the storage slot cannot be read or written."""
    pass


class Unreadable(SessionError):
    """Raised when stored bytes fail to deobfuscate or do not parse as a session record."""
    pass


class IntegrityFailure(SessionError):
    """Raised when a parsed record's checksum does not match its contents."""
    pass


class Expired(SessionError):
    """Raised when a record has been idle longer than the session timeout."""
    pass


class RandomSourceUnavailable(SessionError):
    """Raised when the operating system's secure random source cannot be used. Never recovered."""
    pass
