"""
Booking session store.

Holds the wizard state in an untrusted client-side slot:

    base64(XOR(JSON(record), key))

Every load deobfuscates, parses, checks the timeout and verifies the checksum
before the record is handed to the caller. Any failure clears the slot and a
fresh default record (not persisted) is returned instead. Every save is a full
read-modify-write of the single slot.
"""
import logging
import time
from dataclasses import replace
from datetime import timedelta
from typing import Optional

from config import Config
from models import (
    BookingStep, DriveOption, DELIVERY_METHODS, RenterInfo, SearchCriteria, SessionRecord
)
from booking import serialization
from booking.encryption import deobfuscate, obfuscate
from booking.exceptions import (
    Expired, IntegrityFailure, SessionError, StorageUnavailable, Unreadable
)
from booking.fingerprint import EnvironmentSignals, KeyMaterial, derive_key
from booking.integrity import compute_checksum, verify_checksum
from booking.storage import FlaskSessionStorage
from booking.tokens import new_session_id

logger = logging.getLogger(__name__)

# Fields callers may merge through save(); step moves only through the mutators.
MERGEABLE_FIELDS = frozenset({
    'search_criteria', 'vehicle', 'renter_info', 'drive_option', 'agreed_to_terms',
})


class SessionStore:
    def __init__(
        self,
        storage,
        key: KeyMaterial,
        *,
        storage_key: str = Config.SESSION_STORAGE_KEY,
        timeout: timedelta = Config.SESSION_TIMEOUT,
        clock=time.time,
    ):
        self.storage = storage
        self.key = key
        self.storage_key = storage_key
        self.timeout = timeout
        self.clock = clock
        self.last_error: Optional[SessionError] = None

    @classmethod
    def for_request(cls, request, storage=None, **kwargs):
        """Store for the current Flask request, keyed from its environment signals."""
        key = derive_key(EnvironmentSignals.from_request(request))
        return cls(storage if storage is not None else FlaskSessionStorage(), key, **kwargs)

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def _default_record(self) -> SessionRecord:
        return SessionRecord(session_id=new_session_id(), last_touched_at=self._now_ms())

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    def _read(self):
        """Returns (verified record or None, error or None)."""
        try:
            raw = self.storage.get(self.storage_key)
        except StorageUnavailable as exc:
            logger.error("[SessionStore] Could not read session slot: %s", exc)
            return None, exc

        if raw is None:
            return None, None

        try:
            if not isinstance(raw, str):
                raise Unreadable("Stored session is not text")

            text = deobfuscate(raw, self.key)
            if text is None:
                raise Unreadable("Stored session could not be deobfuscated")

            record = serialization.loads(text)

            age_ms = self._now_ms() - record.last_touched_at
            if age_ms > self.timeout.total_seconds() * 1000:
                raise Expired(f"Session idle for {age_ms // 1000}s")

            if not verify_checksum(serialization.signing_payload(record), self.key, record.checksum):
                raise IntegrityFailure("Session checksum mismatch")
        except SessionError as exc:
            logger.warning("[SessionStore] Discarding stored session (%s): %s",
                           type(exc).__name__, exc)
            self._remove_quietly()
            return None, exc

        return record, None

    def load(self) -> SessionRecord:
        """Verified stored record, or a fresh default record that is not persisted."""
        record, error = self._read()
        self.last_error = error
        if record is None:
            return self._default_record()
        return record

    def is_valid(self) -> bool:
        """True when a verified, unexpired record is persisted."""
        record, error = self._read()
        self.last_error = error
        return record is not None

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def _write(self, record: SessionRecord) -> SessionRecord:
        record = replace(record, last_touched_at=self._now_ms(), checksum='')
        try:
            checksum = compute_checksum(serialization.signing_payload(record), self.key)
            record = replace(record, checksum=checksum)
            blob = obfuscate(serialization.dumps(record), self.key)
        except (TypeError, ValueError) as exc:
            raise StorageUnavailable(f"Session record could not be serialized: {exc}") from exc
        self.storage.set(self.storage_key, blob)
        return record

    def _merge(self, changes: dict, advance_to: Optional[BookingStep] = None) -> SessionRecord:
        current = self.load()
        merged = replace(current, **changes)
        if advance_to is not None:
            merged = replace(merged, step=current.step.advance_to(advance_to))
        return merged

    def _save(self, changes: dict, advance_to: Optional[BookingStep] = None,
              raise_errors: bool = False) -> SessionRecord:
        merged = self._merge(changes, advance_to)
        try:
            return self._write(merged)
        except StorageUnavailable as exc:
            logger.error("[SessionStore] Session not persisted: %s", exc)
            self.last_error = exc
            if raise_errors:
                raise
            return merged

    @staticmethod
    def _check_changes(changes: dict) -> None:
        unknown = set(changes) - MERGEABLE_FIELDS
        if unknown:
            raise TypeError(f"Cannot merge session fields: {', '.join(sorted(unknown))}")

    def save(self, **changes) -> SessionRecord:
        """
        Merge `changes` onto the loaded record, stamp it, recompute the checksum
        and write it. Storage failures are logged and the merged record is
        returned unpersisted.
        """
        self._check_changes(changes)
        return self._save(changes)

    def save_or_raise(self, **changes) -> SessionRecord:
        """Like save(), but raises StorageUnavailable when the write fails."""
        self._check_changes(changes)
        return self._save(changes, raise_errors=True)

    def init(self) -> SessionRecord:
        """Start a new booking session and persist it."""
        record = self._default_record()
        try:
            record = self._write(record)
        except StorageUnavailable as exc:
            logger.error("[SessionStore] New session not persisted: %s", exc)
            self.last_error = exc
            return record
        self.last_error = None
        logger.info("[SessionStore] Started booking session %s", record.session_id)
        return record

    def clear(self) -> None:
        """Remove the stored session; the next load() starts from scratch."""
        self._remove_quietly()

    def _remove_quietly(self) -> None:
        try:
            self.storage.remove(self.storage_key)
        except StorageUnavailable as exc:
            logger.error("[SessionStore] Could not clear session slot: %s", exc)

    # ------------------------------------------------------------------
    # Wizard mutators
    # ------------------------------------------------------------------

    def update_search_criteria(self, criteria) -> SessionRecord:
        if isinstance(criteria, dict):
            criteria = SearchCriteria(**criteria)
        if criteria.delivery_method is not None and criteria.delivery_method not in DELIVERY_METHODS:
            raise ValueError(f"Unknown delivery method '{criteria.delivery_method}'")
        return self._save({'search_criteria': criteria})

    def update_vehicle(self, vehicle: dict) -> SessionRecord:
        """Select a vehicle; moves the session to the booking step."""
        return self._save({'vehicle': dict(vehicle)}, advance_to=BookingStep.BOOKING)

    def update_renter_info(self, info) -> SessionRecord:
        if isinstance(info, dict):
            info = RenterInfo(**info)
        return self._save({'renter_info': info})

    def update_drive_option(self, option) -> SessionRecord:
        return self._save({'drive_option': DriveOption(option)})

    def agree_to_terms(self) -> SessionRecord:
        """Record terms agreement; moves the session to the checkout step."""
        return self._save({'agreed_to_terms': True}, advance_to=BookingStep.CHECKOUT)

    def mark_submitted(self) -> SessionRecord:
        """Used once by booking finalization."""
        return self._save({'step': BookingStep.SUBMITTED})

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def can_proceed_to_checkout(self) -> bool:
        record = self.load()
        return bool(
            record.search_criteria
            and record.vehicle
            and record.renter_info
            and record.drive_option
            and record.agreed_to_terms
        )

    def get_step_data(self, name: str):
        if name not in serialization.RECORD_FIELDS:
            raise KeyError(name)
        return getattr(self.load(), name)


def current_session_store() -> SessionStore:
    """The SessionStore for the active Flask request, created once per request."""
    from flask import g, request

    store = g.get('booking_session_store')
    if store is None:
        store = SessionStore.for_request(request)
        g.booking_session_store = store
    return store
