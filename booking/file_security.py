"""
Upload pre-validation for renter documents (e.g. driver's license photos).
Client-declared MIME type, filename and size are all untrusted.
"""
import os
import secrets
import string

from werkzeug.utils import secure_filename

from config import Config

# Magic numbers (file signatures) for the accepted image types
EXTENSION_TO_MAGIC = {
    'jpg': [b'\xFF\xD8\xFF'],
    'jpeg': [b'\xFF\xD8\xFF'],
    'png': [b'\x89\x50\x4E\x47\x0D\x0A\x1A\x0A'],
    'gif': [b'\x47\x49\x46\x38\x37\x61', b'\x47\x49\x46\x38\x39\x61'],  # GIF87a and GIF89a
}

_PREFIX_ALPHABET = string.ascii_lowercase + string.digits
_PREFIX_LENGTH = 8


def _extension(filename):
    if not filename or '.' not in filename:
        return None
    return filename.rsplit('.', 1)[1].lower()


def validate_upload(mime_type, filename, size):
    """
    Check a declared upload before anything is stored.
    Returns: (is_valid, error_message)
    """
    if mime_type not in Config.ALLOWED_MIME_TYPES:
        return False, 'Invalid file type. Only JPG, PNG, and GIF are allowed.'

    if _extension(filename) not in Config.ALLOWED_EXTENSIONS:
        return False, 'Invalid file extension.'

    if size is None or size < 0 or size > Config.MAX_FILE_SIZE:
        return False, 'File size must be less than 5MB.'

    return True, None


def verify_file_magic_number(file_content, expected_extension):
    """
    Verify file content matches its extension using magic numbers
    Returns: True when the content starts with a known signature for the extension
    """
    if not file_content or len(file_content) < 4:
        return False

    expected_magics = EXTENSION_TO_MAGIC.get(expected_extension.lower().lstrip('.'), [])
    return any(file_content.startswith(magic) for magic in expected_magics)


def validate_uploaded_file(file_storage):
    """
    Validate a werkzeug FileStorage:
    1. Declared MIME type, extension and size
    2. Magic number matches the extension

    Returns: (is_valid, error_message)
    """
    if not file_storage or not file_storage.filename:
        return False, 'No file provided'

    file_storage.stream.seek(0, os.SEEK_END)
    size = file_storage.stream.tell()
    file_storage.stream.seek(0)

    is_valid, error = validate_upload(file_storage.mimetype, file_storage.filename, size)
    if not is_valid:
        return False, error

    head = file_storage.stream.read(16)
    file_storage.stream.seek(0)  # Reset for actual save

    if not verify_file_magic_number(head, _extension(file_storage.filename)):
        return False, 'File content does not match its extension.'

    return True, None


def sanitize_filename(filename):
    """
    Sanitize filename to prevent directory traversal and collisions
    Returns: random prefix + '_' + safe basename
    """
    basename = (filename or '').replace('\\', '/').rsplit('/', 1)[-1]
    safe = secure_filename(basename) or 'file'
    prefix = ''.join(secrets.choice(_PREFIX_ALPHABET) for _ in range(_PREFIX_LENGTH))
    return f"{prefix}_{safe}"
