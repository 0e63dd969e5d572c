from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Optional

# Vehicle data
VEHICLES = {
    1: {
        'id': 1,
        'name': 'Toyota Sienta Hybrid',
        'type': 'Hybrid',
        'price_per_day': 150,
        'pickup_location': 'Jurong Point, Singapore',
        'image': 'images/toyota.png',
        'seats': 7,
    },
    2: {
        'id': 2,
        'name': 'Honda Civic',
        'type': 'Hybrid',
        'price_per_day': 120,
        'pickup_location': 'Northpoint, Singapore',
        'image': 'images/civic.png',
        'seats': 5,
    },
    3: {
        'id': 3,
        'name': 'TOYOTA Corolla Cross',
        'type': 'Petrol',
        'price_per_day': 110,
        'pickup_location': 'Bedok, Singapore',
        'image': 'images/corolla.png',
        'seats': 5,
    },
    4: {
        'id': 4,
        'name': 'AVANTE Hybrid',
        'type': 'Hybrid',
        'price_per_day': 180,
        'pickup_location': 'Bishan, Singapore',
        'image': 'images/avante.png',
        'seats': 5,
    },
}

# Finalized bookings keyed by booking reference. Only the magic token hash is kept.
BOOKINGS = {}


class BookingStep(Enum):
    """Ordered steps of the booking wizard."""

    BROWSE = 'browse'
    BOOKING = 'booking'
    CHECKOUT = 'checkout'
    SUBMITTED = 'submitted'

    @property
    def index(self) -> int:
        return STEP_ORDER.index(self)

    def advance_to(self, target: 'BookingStep') -> 'BookingStep':
        """Return the later of the two steps; progress never moves backwards."""
        return target if target.index > self.index else self


STEP_ORDER = (
    BookingStep.BROWSE,
    BookingStep.BOOKING,
    BookingStep.CHECKOUT,
    BookingStep.SUBMITTED,
)


class DriveOption(Enum):
    SELF_DRIVE = 'self-drive'
    WITH_DRIVER = 'with-driver'


DELIVERY_METHODS = ('pickup', 'delivery')


@dataclass(frozen=True)
class SearchCriteria:
    pickup_location: str
    pickup_date: str
    return_date: str
    start_time: str
    delivery_method: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class RenterInfo:
    full_name: str
    email: str
    phone_number: str
    drivers_license: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SessionRecord:
    """
    The single booking-wizard state blob kept in client storage.

    `last_touched_at` is epoch milliseconds of the last successful save.
    `checksum` is the HMAC tag over every other field.
    """

    session_id: str
    step: BookingStep = BookingStep.BROWSE
    search_criteria: Optional[SearchCriteria] = None
    vehicle: Optional[dict] = None
    renter_info: Optional[RenterInfo] = None
    drive_option: Optional[DriveOption] = None
    agreed_to_terms: bool = False
    last_touched_at: int = 0
    checksum: str = field(default='', compare=False)
