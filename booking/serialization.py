"""
Deterministic JSON (de)serialization of SessionRecord.

The checksum is computed over `canonical_json(record_to_dict(record))` with the
checksum field blanked, so the same function must be used for signing,
verifying and persisting.
"""
import json
from dataclasses import fields

from booking.exceptions import Unreadable
from models import (
    BookingStep, DriveOption, DELIVERY_METHODS, RenterInfo, SearchCriteria, SessionRecord
)

RECORD_FIELDS = tuple(f.name for f in fields(SessionRecord))


def canonical_json(data: dict) -> str:
    return json.dumps(data, sort_keys=True, separators=(',', ':'), ensure_ascii=False)


def record_to_dict(record: SessionRecord, include_checksum: bool = True) -> dict:
    return {
        'session_id': record.session_id,
        'step': record.step.value,
        'search_criteria': record.search_criteria.to_dict() if record.search_criteria else None,
        'vehicle': record.vehicle,
        'renter_info': record.renter_info.to_dict() if record.renter_info else None,
        'drive_option': record.drive_option.value if record.drive_option else None,
        'agreed_to_terms': record.agreed_to_terms,
        'last_touched_at': record.last_touched_at,
        'checksum': record.checksum if include_checksum else '',
    }


def signing_payload(record: SessionRecord) -> str:
    """The exact string the checksum covers."""
    return canonical_json(record_to_dict(record, include_checksum=False))


def dumps(record: SessionRecord) -> str:
    return canonical_json(record_to_dict(record))


def _require_str(data: dict, name: str, optional: bool = False):
    value = data.get(name)
    if value is None and optional:
        return None
    if not isinstance(value, str):
        raise Unreadable(f"Field '{name}' must be a string")
    return value


def _parse_search_criteria(value):
    if value is None:
        return None
    if not isinstance(value, dict):
        raise Unreadable("search_criteria must be an object")
    delivery_method = _require_str(value, 'delivery_method', optional=True)
    if delivery_method is not None and delivery_method not in DELIVERY_METHODS:
        raise Unreadable(f"Unknown delivery method '{delivery_method}'")
    return SearchCriteria(
        pickup_location=_require_str(value, 'pickup_location'),
        pickup_date=_require_str(value, 'pickup_date'),
        return_date=_require_str(value, 'return_date'),
        start_time=_require_str(value, 'start_time'),
        delivery_method=delivery_method,
    )


def _parse_renter_info(value):
    if value is None:
        return None
    if not isinstance(value, dict):
        raise Unreadable("renter_info must be an object")
    return RenterInfo(
        full_name=_require_str(value, 'full_name'),
        email=_require_str(value, 'email'),
        phone_number=_require_str(value, 'phone_number'),
        drivers_license=_require_str(value, 'drivers_license'),
    )


def record_from_dict(data) -> SessionRecord:
    """Validate the shape of a decoded record. Raises Unreadable on any mismatch."""
    if not isinstance(data, dict):
        raise Unreadable("Session record must be an object")

    missing = [name for name in RECORD_FIELDS if name not in data]
    if missing:
        raise Unreadable(f"Session record missing fields: {', '.join(missing)}")

    try:
        step = BookingStep(data['step'])
        drive_option = DriveOption(data['drive_option']) if data['drive_option'] is not None else None
    except ValueError as exc:
        raise Unreadable(str(exc)) from exc

    vehicle = data['vehicle']
    if vehicle is not None and not isinstance(vehicle, dict):
        raise Unreadable("vehicle must be an object")

    agreed = data['agreed_to_terms']
    if not isinstance(agreed, bool):
        raise Unreadable("agreed_to_terms must be a boolean")

    touched = data['last_touched_at']
    if isinstance(touched, bool) or not isinstance(touched, int):
        raise Unreadable("last_touched_at must be an integer")

    return SessionRecord(
        session_id=_require_str(data, 'session_id'),
        step=step,
        search_criteria=_parse_search_criteria(data['search_criteria']),
        vehicle=vehicle,
        renter_info=_parse_renter_info(data['renter_info']),
        drive_option=drive_option,
        agreed_to_terms=agreed,
        last_touched_at=touched,
        checksum=_require_str(data, 'checksum'),
    )


def loads(text: str) -> SessionRecord:
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise Unreadable(f"Session record is not valid JSON: {exc}") from exc
    record = record_from_dict(data)
    # Anything but the exact bytes dumps() produces is foreign or edited
    if dumps(record) != text:
        raise Unreadable("Session record is not in canonical form")
    return record
