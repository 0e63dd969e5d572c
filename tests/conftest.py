"""
Shared fixtures for the booking-session tests.

The project root is put on sys.path so the flat modules (config, models, app)
import the same way they do when the app is run from the repository root.
"""
import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest

from booking.fingerprint import EnvironmentSignals, derive_key
from booking.session_manager import SessionStore
from booking.storage import MemoryStorage


class FakeClock:
    """Callable clock returning epoch seconds; advance() moves it forward."""

    def __init__(self, start=1_760_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def signals():
    return EnvironmentSignals(
        user_agent='Mozilla/5.0 (X11; Linux x86_64) Firefox/131.0',
        screen_width=1920,
        screen_height=1080,
        timezone='Asia/Singapore',
    )


@pytest.fixture
def key(signals):
    return derive_key(signals)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(storage, key, clock):
    return SessionStore(storage, key, clock=clock)


@pytest.fixture
def vehicle():
    return {'id': 2, 'name': 'Honda Civic', 'type': 'Hybrid', 'price_per_day': 120}


@pytest.fixture
def search_criteria():
    return {
        'pickup_location': 'Northpoint, Singapore',
        'pickup_date': '2099-11-02',
        'return_date': '2099-11-05',
        'start_time': '09:30',
        'delivery_method': 'pickup',
    }


@pytest.fixture
def renter():
    return {
        'full_name': 'Mei Ling Tan',
        'email': 'meiling@example.com',
        'phone_number': '91234567',
        'drivers_license': 'S1234567A',
    }
