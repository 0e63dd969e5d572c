import pytest

from booking.steps import can_access
from models import STEP_ORDER, BookingStep, SessionRecord


@pytest.mark.parametrize('current', STEP_ORDER)
@pytest.mark.parametrize('requested', STEP_ORDER)
def test_can_access_iff_requested_not_ahead(store, current, requested) -> None:
    store._write(SessionRecord(session_id='9a0e6c4b-4c61-4d4f-8f1e-2d9b3b7a5c10', step=current))
    assert can_access(requested, store) is (requested.index <= current.index)


def test_checkout_session_access(store, vehicle) -> None:
    store.update_vehicle(vehicle)
    store.agree_to_terms()
    assert can_access(BookingStep.BROWSE, store)
    assert can_access(BookingStep.BOOKING, store)
    assert can_access(BookingStep.CHECKOUT, store)
    assert not can_access(BookingStep.SUBMITTED, store)


def test_no_session_only_allows_browse(store) -> None:
    assert can_access('browse', store)
    assert not can_access('booking', store)


def test_scenario_denies_submitted_before_finalize(store, vehicle) -> None:
    store.init()
    store.update_vehicle(vehicle)
    store.agree_to_terms()
    assert not can_access(BookingStep.SUBMITTED, store)


def test_unknown_step_is_rejected(store) -> None:
    with pytest.raises(ValueError):
        can_access('payment', store)


def test_advance_to_never_moves_backwards() -> None:
    assert BookingStep.BROWSE.advance_to(BookingStep.BOOKING) is BookingStep.BOOKING
    assert BookingStep.CHECKOUT.advance_to(BookingStep.BOOKING) is BookingStep.CHECKOUT
    assert BookingStep.SUBMITTED.advance_to(BookingStep.CHECKOUT) is BookingStep.SUBMITTED
