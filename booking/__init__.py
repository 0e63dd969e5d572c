# Booking-session trust layer: session store, step guard and token issuance

from .exceptions import (
    SessionError,
    StorageUnavailable,
    Unreadable,
    IntegrityFailure,
    Expired,
    RandomSourceUnavailable,
    RESET_MESSAGE
)

from .fingerprint import (
    EnvironmentSignals,
    KeyMaterial,
    derive_key
)

from .encryption import obfuscate, deobfuscate
from .integrity import compute_checksum, verify_checksum

from .storage import MemoryStorage, FlaskSessionStorage

from .session_manager import SessionStore, current_session_store

from .steps import can_access, booking_step_required

from .tokens import (
    IssuedToken,
    new_session_id,
    new_booking_reference,
    new_magic_token,
    hash_token,
    compute_expiry,
    is_expired,
    issue_magic_token
)

from .validation import (
    validate_name,
    validate_email,
    validate_phone,
    validate_license,
    validate_renter_info,
    validate_search_criteria
)

from .file_security import validate_upload, validate_uploaded_file, sanitize_filename
