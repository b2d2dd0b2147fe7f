"""
Unit tests for BookingsAPI.

Bookings arrive in both the current shape and the legacy
"Confirmed"/"Not Confirmed" shape; status changes are single-field PATCHes.
"""

import pytest

from maple_admin.api.bookings import BookingsAPI
from maple_admin.exceptions import ValidationError

BASE_URL = "http://api.test/api"


def _bookings_payload():
    return [
        {
            "_id": "b1",
            "package": {"_id": "p1", "title": "Kerala Backwaters"},
            "startDate": "2025-03-05T00:00:00.000Z",
            "adults": 2,
            "children": 1,
            "firstName": "Asha",
            "lastName": "Menon",
            "email": "asha@example.com",
            "bookingStatus": "confirmed",
            "paymentStatus": "completed",
            "totalAmount": 49998,
        },
        {
            "_id": "b2",
            "package": "Goa Beaches",
            "date": "2025-04-01",
            "status": "Not Confirmed",
            "cardNumber": "4111111111111111",
        },
        {"_id": "b3", "bookingStatus": "cancelled", "paymentStatus": "failed"},
    ]


@pytest.fixture
def api(http_session):
    return BookingsAPI(session=http_session, base_url=BASE_URL)


def test_list_bookings_normalises_both_shapes(api, http_session, response_factory):
    http_session.request.return_value = response_factory(_bookings_payload())

    bookings = api.list_bookings()

    assert [b.booking_status for b in bookings] == ["confirmed", "pending", "cancelled"]
    first, legacy, _ = bookings
    assert first.package_title == "Kerala Backwaters"
    assert first.customer_name == "Asha Menon"
    assert first.counts_towards_revenue() is True
    assert legacy.package_title == "Goa Beaches"
    assert legacy.start_date == "2025-04-01"
    assert legacy.payment_status == "pending"


def test_list_bookings_filters_by_status(api, http_session, response_factory):
    http_session.request.return_value = response_factory({"data": _bookings_payload()})

    bookings = api.list_bookings(status="pending")

    assert [b.booking_id for b in bookings] == ["b2"]


def test_list_bookings_skips_non_object_entries(api, http_session, response_factory):
    http_session.request.return_value = response_factory(
        [{"_id": "b1", "bookingStatus": "confirmed"}, "garbage", None, 42]
    )

    bookings = api.list_bookings()

    assert [b.booking_id for b in bookings] == ["b1"]


def test_list_bookings_rejects_unknown_status(api, http_session):
    with pytest.raises(ValidationError):
        api.list_bookings(status="on-hold")
    http_session.request.assert_not_called()


def test_confirm_booking_patches_status(api, http_session, response_factory):
    http_session.request.return_value = response_factory({"message": "Booking updated"})

    assert api.confirm_booking("b2") == "confirmed"

    call = http_session.request.call_args
    assert call.args == ("PATCH", f"{BASE_URL}/bookings/b2")
    assert call.kwargs["json"] == {"bookingStatus": "confirmed"}


def test_cancel_booking(api, http_session, response_factory):
    http_session.request.return_value = response_factory({"message": "Booking updated"})

    api.cancel_booking("b1")

    assert http_session.request.call_args.kwargs["json"] == {"bookingStatus": "cancelled"}


def test_toggle_confirmation(api, http_session, response_factory):
    http_session.request.side_effect = [
        response_factory(_bookings_payload()),
        response_factory({"message": "ok"}),
        response_factory({"message": "ok"}),
    ]

    confirmed = api.find_booking("b1")
    assert api.toggle_confirmation(confirmed) == "pending"
    assert confirmed.booking_status == "pending"
    assert api.toggle_confirmation(confirmed) == "confirmed"


def test_set_payment_status(api, http_session, response_factory):
    http_session.request.return_value = response_factory({"message": "ok"})

    api.set_payment_status("b1", "failed")

    assert http_session.request.call_args.kwargs["json"] == {"paymentStatus": "failed"}


def test_set_payment_status_rejects_unknown(api, http_session):
    with pytest.raises(ValidationError, match="Payment status must be one of"):
        api.set_payment_status("b1", "refunded")
    http_session.request.assert_not_called()


def test_find_booking_missing(api, http_session, response_factory):
    http_session.request.return_value = response_factory([])

    with pytest.raises(ValidationError, match="Booking b9 not found"):
        api.find_booking("b9")
