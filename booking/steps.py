"""
Step guard for the booking wizard.

A step may be shown when it is at or before the furthest step the session has
legitimately reached. Progress itself only moves through the SessionStore
mutators; nothing here writes to the session.
"""
from functools import wraps

from flask import flash, redirect, url_for

from models import BookingStep
from booking.exceptions import RESET_MESSAGE
from booking.session_manager import current_session_store


def can_access(requested_step, store) -> bool:
    """True iff index(requested_step) <= index(current step)."""
    requested = BookingStep(requested_step)
    return requested.index <= store.load().step.index


def booking_step_required(step, fallback_endpoint='browse'):
    """
    Decorator to guard a booking page by wizard step
    Usage: @booking_step_required(BookingStep.CHECKOUT)
    """
    required = BookingStep(step)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            store = current_session_store()
            if not store.is_valid():
                if store.last_error is not None:
                    flash(RESET_MESSAGE, 'error')
                else:
                    flash('Please choose a vehicle to start your booking', 'error')
                return redirect(url_for(fallback_endpoint))

            if not can_access(required, store):
                flash('Please complete the previous booking steps first', 'error')
                return redirect(url_for(fallback_endpoint))

            return f(*args, **kwargs)

        return decorated_function

    return decorator
