import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration"""

    # Flask
    SECRET_KEY = os.environ.get('SECRET_KEY', 'your-secret-key-here-change-in-production')
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'False').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True     # block JS access to cookies
    SESSION_COOKIE_SAMESITE = 'Lax'    # CSRF-hardening for most flows
    PREFERRED_URL_SCHEME = 'http'

    # Booking session
    SESSION_STORAGE_KEY = os.environ.get('SESSION_STORAGE_KEY', 'ar_booking_session')
    SESSION_TIMEOUT_MINUTES = int(os.environ.get('SESSION_TIMEOUT_MINUTES', '30'))
    SESSION_TIMEOUT = timedelta(minutes=SESSION_TIMEOUT_MINUTES)

    # Booking references and magic links
    BOOKING_REFERENCE_PREFIX = 'AR'
    MAGIC_LINK_GRACE_HOURS = int(os.environ.get('MAGIC_LINK_GRACE_HOURS', '24'))
    MAGIC_LINK_GRACE = timedelta(hours=MAGIC_LINK_GRACE_HOURS)

    # File Upload
    UPLOAD_FOLDER = 'static/uploads'
    ALLOWED_EXTENSIONS = {'jpg', 'jpeg', 'png', 'gif'}
    ALLOWED_MIME_TYPES = {'image/jpeg', 'image/png', 'image/gif'}
    MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB
