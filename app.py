from flask import Flask, request, redirect, url_for, jsonify, flash
from datetime import datetime
import hmac
import logging

# Import configuration
from config import Config

# Import data models
from models import VEHICLES, BOOKINGS, BookingStep

# Import booking-session trust layer
from booking import (
    RESET_MESSAGE, RandomSourceUnavailable,
    current_session_store, can_access, booking_step_required,
    new_booking_reference, issue_magic_token, hash_token, is_expired,
    validate_renter_info, validate_search_criteria,
    validate_uploaded_file, sanitize_filename
)
from booking.serialization import record_to_dict

logger = logging.getLogger(__name__)

app = Flask(__name__)

app.config.from_object(Config)


def _session_payload(store, record):
    """JSON view of a session record. The checksum never leaves the server."""
    data = record_to_dict(record, include_checksum=False)
    data.pop('checksum', None)
    payload = {'session': data, 'reset': store.last_error is not None}
    if store.last_error is not None:
        payload['message'] = RESET_MESSAGE
    return payload


def _parse_step(value):
    try:
        return BookingStep(value)
    except ValueError:
        return None


# ============================================
# BOOKING WIZARD PAGES
# ============================================

@app.route('/')
@app.route('/browse')
def browse():
    """Vehicle browse page - entry point of the booking flow"""
    store = current_session_store()
    record = store.load()
    return jsonify({
        'vehicles': list(VEHICLES.values()),
        **_session_payload(store, record)
    })


@app.route('/booking')
@booking_step_required(BookingStep.BOOKING)
def booking_page():
    """Renter details page"""
    store = current_session_store()
    return jsonify(_session_payload(store, store.load()))


@app.route('/checkout')
@booking_step_required(BookingStep.CHECKOUT)
def checkout_page():
    """Checkout page"""
    store = current_session_store()
    record = store.load()
    payload = _session_payload(store, record)
    payload['ready'] = store.can_proceed_to_checkout()
    return jsonify(payload)


@app.route('/booking/confirmation')
@booking_step_required(BookingStep.SUBMITTED)
def confirmation_page():
    """Shown after the booking was submitted"""
    store = current_session_store()
    return jsonify(_session_payload(store, store.load()))


# ============================================
# BOOKING SESSION API
# ============================================

@app.route('/api/session', methods=['GET'])
def get_session_state():
    """Current booking session (fresh default if none is stored)"""
    store = current_session_store()
    return jsonify(_session_payload(store, store.load()))


@app.route('/api/session', methods=['POST'])
def start_session():
    """Start a new booking session"""
    store = current_session_store()
    record = store.init()
    return jsonify(_session_payload(store, record)), 201


@app.route('/api/session', methods=['DELETE'])
def reset_session():
    """Restart the booking flow"""
    current_session_store().clear()
    return jsonify({'success': True})


@app.route('/api/session/search', methods=['PUT'])
def update_search():
    """Save the vehicle search form"""
    criteria, errors = validate_search_criteria(request.get_json(silent=True))
    if errors:
        return jsonify({'errors': errors}), 400

    store = current_session_store()
    record = store.update_search_criteria(criteria)
    return jsonify(_session_payload(store, record))


@app.route('/api/session/vehicle/<int:vehicle_id>', methods=['PUT'])
def select_vehicle(vehicle_id):
    """Choose a vehicle and move on to the booking step"""
    vehicle = VEHICLES.get(vehicle_id)
    if not vehicle:
        return jsonify({'error': 'Vehicle not found'}), 404

    store = current_session_store()
    record = store.update_vehicle(vehicle)
    return jsonify(_session_payload(store, record))


@app.route('/api/session/renter', methods=['PUT'])
def update_renter():
    """Save the renter details form"""
    store = current_session_store()
    if not can_access(BookingStep.BOOKING, store):
        return jsonify({'error': 'Please choose a vehicle first'}), 403

    info, errors = validate_renter_info(request.get_json(silent=True))
    if errors:
        return jsonify({'errors': errors}), 400

    record = store.update_renter_info(info)
    return jsonify(_session_payload(store, record))


@app.route('/api/session/drive-option', methods=['PUT'])
def update_drive_option():
    """Choose self-drive or with-driver"""
    store = current_session_store()
    if not can_access(BookingStep.BOOKING, store):
        return jsonify({'error': 'Please choose a vehicle first'}), 403

    data = request.get_json(silent=True)
    option = data.get('drive_option') if isinstance(data, dict) else None
    try:
        record = store.update_drive_option(option)
    except ValueError:
        return jsonify({'error': 'drive_option must be self-drive or with-driver'}), 400
    return jsonify(_session_payload(store, record))


@app.route('/api/session/terms', methods=['POST'])
def agree_terms():
    """Accept the rental terms and move on to checkout"""
    store = current_session_store()
    if not can_access(BookingStep.BOOKING, store):
        return jsonify({'error': 'Please choose a vehicle first'}), 403

    record = store.agree_to_terms()
    return jsonify(_session_payload(store, record))


@app.route('/api/session/access/<step>', methods=['GET'])
def check_step_access(step):
    """Route-guard check for client-side navigation"""
    requested = _parse_step(step)
    if requested is None:
        return jsonify({'error': f"Unknown step '{step}'"}), 404

    store = current_session_store()
    return jsonify({'step': requested.value, 'allowed': can_access(requested, store)})


@app.route('/api/session/finalize', methods=['POST'])
def finalize_booking():
    """
    Submit the booking: mint a reference and a magic-link token, keep only the
    token hash, and mark the session as submitted.
    """
    store = current_session_store()
    if not store.is_valid() or not can_access(BookingStep.CHECKOUT, store):
        return jsonify({'error': 'Please complete the previous booking steps first'}), 403

    if not store.can_proceed_to_checkout():
        return jsonify({'error': 'Booking details are incomplete'}), 400

    record = store.load()
    try:
        reference = new_booking_reference()
        while reference in BOOKINGS:
            reference = new_booking_reference()
        token = issue_magic_token(record.search_criteria.return_date)
    except RandomSourceUnavailable:
        logger.critical("[Booking] Secure random source unavailable, refusing to issue booking")
        raise

    BOOKINGS[reference] = {
        'booking_reference': reference,
        'session_id': record.session_id,
        'vehicle_id': record.vehicle.get('id'),
        'vehicle_name': record.vehicle.get('name'),
        'search_criteria': record.search_criteria.to_dict(),
        'renter_info': record.renter_info.to_dict(),
        'drive_option': record.drive_option.value,
        'magic_token_hash': token.stored_hash,
        'token_expires_at': token.expires_at,
        'status': 'Pending',
        'created_at': datetime.now(),
    }
    store.mark_submitted()
    logger.info("[Booking] Booking %s submitted for session %s", reference, record.session_id)

    # The raw token is handed out once; the email collaborator embeds it in the link.
    magic_link = url_for('track_booking', reference=reference, token=token.raw_value, _external=True)
    return jsonify({
        'booking_reference': reference,
        'magic_link': magic_link,
        'expires_at': token.expires_at.isoformat(),
    }), 201


@app.route('/api/bookings/<reference>', methods=['GET'])
def track_booking(reference):
    """Anonymous booking lookup authorized by the magic-link token"""
    booking = BOOKINGS.get(reference)
    token = request.args.get('token', '')

    if not booking or not token or not hmac.compare_digest(hash_token(token), booking['magic_token_hash']):
        return jsonify({'error': 'Invalid tracking link'}), 404

    if is_expired(booking['token_expires_at']):
        return jsonify({'error': 'This tracking link has expired'}), 410

    return jsonify({
        'booking_reference': booking['booking_reference'],
        'vehicle_name': booking['vehicle_name'],
        'pickup_date': booking['search_criteria']['pickup_date'],
        'return_date': booking['search_criteria']['return_date'],
        'status': booking['status'],
    })


# ============================================
# UPLOADS
# ============================================

@app.route('/api/uploads/validate', methods=['POST'])
def validate_upload_route():
    """Pre-validate a driver's license photo before it is sent to storage"""
    file = request.files.get('file')
    is_valid, error = validate_uploaded_file(file)
    if not is_valid:
        return jsonify({'valid': False, 'error': error}), 400

    return jsonify({'valid': True, 'filename': sanitize_filename(file.filename)})


@app.route('/restart')
def restart_booking():
    """Clear progress and go back to the vehicle list"""
    current_session_store().clear()
    flash('Your booking has been reset.', 'info')
    return redirect(url_for('browse'))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    # Run without HTTPS - change to ssl_context="adhoc" to enable HTTPS
    app.run(debug=True, host='127.0.0.1', port=5000)
