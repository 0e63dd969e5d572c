import re
from datetime import date

from models import RenterInfo, SearchCriteria, DELIVERY_METHODS


def validate_name(name):
    """
    Validate name format
    - Must be at least 2 characters
    - Only letters, spaces, hyphens, and apostrophes allowed
    """
    if not name or len(name) < 2:
        return False

    pattern = r"^[a-zA-Z\s\-']+$"
    return re.match(pattern, name) is not None


def validate_email(email):
    """Validate email format"""
    if not email:
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return re.match(pattern, email) is not None


def validate_phone(phone):
    """
    Validate Singapore phone number
    - Must be 8 digits
    - Must start with 6, 8, or 9
    """
    if not phone:
        return False

    pattern = r'^[689]\d{7}$'
    return re.match(pattern, phone) is not None


def validate_license(license_number):
    """
    Validate Singapore driver's license number
    Format examples: S1234567A, S12345678
    """
    if not license_number:
        return False

    pattern = r'^[A-Z]\d{7,8}[A-Z]?$'
    return re.match(pattern, license_number) is not None


def validate_renter_info(data):
    """
    Validate the renter form.
    Returns: (RenterInfo or None, errors dict keyed by field)
    """
    if not isinstance(data, dict):
        data = {}
    full_name = (data.get('full_name') or '').strip()
    email = (data.get('email') or '').strip()
    phone_number = (data.get('phone_number') or '').replace(' ', '')
    drivers_license = (data.get('drivers_license') or '').strip().upper()

    errors = {}
    if not validate_name(full_name):
        errors['full_name'] = 'Please enter your full name'
    if not validate_email(email):
        errors['email'] = 'Please enter a valid email address'
    if not validate_phone(phone_number):
        errors['phone_number'] = 'Phone number must be 8 digits starting with 6, 8 or 9'
    if not validate_license(drivers_license):
        errors['drivers_license'] = "Please enter a valid driver's license number"

    if errors:
        return None, errors
    return RenterInfo(full_name, email, phone_number, drivers_license), {}


def _parse_date(value):
    """Parse a YYYY-MM-DD string; None for anything else, including 2099-02-30"""
    if not re.match(r'^\d{4}-\d{2}-\d{2}$', value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def validate_search_criteria(data):
    """
    Validate the vehicle search form.
    Returns: (SearchCriteria or None, errors dict keyed by field)
    """
    if not isinstance(data, dict):
        data = {}
    errors = {}
    values = {}
    for name in ('pickup_location', 'pickup_date', 'return_date', 'start_time'):
        value = data.get(name)
        if not isinstance(value, str) or not value.strip():
            errors[name] = 'This field is required'
        else:
            values[name] = value.strip()

    if 'pickup_date' in values and 'return_date' in values:
        pickup_date = _parse_date(values['pickup_date'])
        return_date = _parse_date(values['return_date'])
        if pickup_date is None or return_date is None:
            errors['pickup_date'] = 'Dates must be valid YYYY-MM-DD dates'
        elif return_date < pickup_date:
            errors['return_date'] = 'Return date must be on or after the pickup date'

    delivery_method = data.get('delivery_method')
    if delivery_method is not None and delivery_method not in DELIVERY_METHODS:
        errors['delivery_method'] = 'Delivery method must be pickup or delivery'

    if errors:
        return None, errors
    return SearchCriteria(delivery_method=delivery_method, **values), {}
