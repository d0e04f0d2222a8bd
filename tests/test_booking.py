import datetime
import threading

import pytest

from tablelink_app.booking import (
    book_table,
    change_status,
    list_reservations,
    set_reservation_status,
    submit_reservation,
)
from tablelink_app.capacity import booked_guests
from tablelink_app.db import connect
from tablelink_app.errors import CapacityExceededError, InvalidTransitionError, ValidationError
from tablelink_app.restaurants import update_restaurant


def submit_concurrently(db_path, forms):
    """Submit each form from its own thread and connection, all released at once."""
    barrier = threading.Barrier(len(forms))
    outcomes = [None] * len(forms)

    def worker(index, form):
        conn = connect(db_path)
        try:
            barrier.wait()
            outcomes[index] = submit_reservation(conn, form)
        except Exception as e:
            outcomes[index] = e
        finally:
            conn.close()

    threads = [threading.Thread(target=worker, args=(i, form)) for i, form in enumerate(forms)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return outcomes


def test_submit_returns_pending_reservation(conn, restaurant_id, make_form):
    reservation_id = submit_reservation(conn, make_form(restaurant_id, status="confirmed"))
    [reservation] = list_reservations(conn, restaurant_id)
    assert reservation.id == reservation_id
    assert reservation.status.value == "pending"


def test_past_date_rejected_regardless_of_capacity(conn, make_restaurant, make_form):
    restaurant_id = make_restaurant(max_capacity=None)
    yesterday = datetime.date.today() - datetime.timedelta(days=1)
    with pytest.raises(ValidationError) as exc:
        submit_reservation(conn, make_form(restaurant_id, reservation_date=yesterday.isoformat()))
    assert exc.value.field == "reservation_date"
    assert list_reservations(conn, restaurant_id) == []


@pytest.mark.parametrize("guests", [0, 21])
def test_guest_count_out_of_bounds(conn, make_restaurant, make_form, guests):
    restaurant_id = make_restaurant(max_capacity=None)
    with pytest.raises(ValidationError):
        submit_reservation(conn, make_form(restaurant_id, number_of_guests=guests))


@pytest.mark.parametrize("guests", [1, 20])
def test_guest_count_at_bounds(conn, make_restaurant, make_form, guests):
    restaurant_id = make_restaurant(max_capacity=None)
    assert submit_reservation(conn, make_form(restaurant_id, number_of_guests=guests))


def test_inactive_restaurant_rejected(conn, restaurant_id, make_form):
    update_restaurant(conn, restaurant_id, is_active=False)
    with pytest.raises(ValidationError) as exc:
        submit_reservation(conn, make_form(restaurant_id))
    assert exc.value.field == "restaurant_id"


def test_unknown_restaurant_rejected(conn, make_form):
    with pytest.raises(ValidationError):
        submit_reservation(conn, make_form("does-not-exist"))


def test_sequential_submissions_stop_at_capacity(conn, restaurant_id, make_form):
    submit_reservation(conn, make_form(restaurant_id, number_of_guests=6))
    with pytest.raises(CapacityExceededError):
        submit_reservation(conn, make_form(restaurant_id, number_of_guests=6))
    submit_reservation(conn, make_form(restaurant_id, number_of_guests=4))
    form = make_form(restaurant_id)
    assert booked_guests(conn, restaurant_id, form["reservation_date"], form["reservation_time"]) == 10


def test_two_concurrent_parties_of_six_only_one_admitted(conn, db_path, restaurant_id, make_form):
    outcomes = submit_concurrently(db_path, [make_form(restaurant_id, number_of_guests=6)] * 2)

    admitted = [o for o in outcomes if isinstance(o, str)]
    rejected = [o for o in outcomes if isinstance(o, CapacityExceededError)]
    assert len(admitted) == 1
    assert len(rejected) == 1
    assert len(list_reservations(conn, restaurant_id)) == 1


def test_many_concurrent_submissions_never_overbook(conn, db_path, make_restaurant, make_form):
    restaurant_id = make_restaurant(max_capacity=10)
    outcomes = submit_concurrently(db_path, [make_form(restaurant_id, number_of_guests=3)] * 8)

    assert sum(isinstance(o, str) for o in outcomes) == 3
    assert all(isinstance(o, (str, CapacityExceededError)) for o in outcomes)
    form = make_form(restaurant_id)
    assert booked_guests(conn, restaurant_id, form["reservation_date"], form["reservation_time"]) == 9


def test_uncapped_restaurant_accepts_all_concurrent_submissions(conn, db_path, make_restaurant, make_form):
    restaurant_id = make_restaurant(max_capacity=None)
    outcomes = submit_concurrently(db_path, [make_form(restaurant_id, number_of_guests=20)] * 6)

    assert all(isinstance(o, str) for o in outcomes)
    assert len(list_reservations(conn, restaurant_id)) == 6


def test_cancelled_is_terminal(conn, restaurant_id, make_form):
    reservation_id = submit_reservation(conn, make_form(restaurant_id))
    set_reservation_status(conn, reservation_id, "cancelled")
    for status in ("pending", "confirmed", "cancelled"):
        with pytest.raises(InvalidTransitionError):
            set_reservation_status(conn, reservation_id, status)


# --- boundary handlers ---

def test_book_table_success_message(conn, restaurant_id, make_form):
    result = book_table(conn, make_form(restaurant_id))
    assert result.success
    assert result.data["status"] == "pending"
    assert result.data["reservation_id"]
    assert result.error is None


def test_book_table_reports_field_errors(conn, restaurant_id, make_form):
    result = book_table(conn, make_form(restaurant_id, customer_email="not-an-email"))
    assert not result.success
    assert result.data == {"field": "customer_email"}
    assert "email" in result.error


def test_book_table_reports_full_slot(conn, restaurant_id, make_form):
    book_table(conn, make_form(restaurant_id, number_of_guests=10))
    result = book_table(conn, make_form(restaurant_id, number_of_guests=1))
    assert not result.success
    assert result.data["kind"] == "CapacityExceededError"
    assert result.error == CapacityExceededError.user_message


def test_book_table_reports_storage_failure(conn, restaurant_id, make_form):
    conn.execute("DROP TABLE reservations")
    result = book_table(conn, make_form(restaurant_id))
    assert not result.success
    assert result.data["kind"] == "CapacityCheckError"
    assert "try again" in result.error


def test_change_status_handler(conn, restaurant_id, make_form):
    reservation_id = submit_reservation(conn, make_form(restaurant_id))

    confirmed = change_status(conn, reservation_id, "confirmed", restaurant_id=restaurant_id)
    assert confirmed.success
    assert confirmed.data["status"] == "confirmed"

    again = change_status(conn, reservation_id, "pending", restaurant_id=restaurant_id)
    assert not again.success
    assert again.data["kind"] == "InvalidTransitionError"

    missing = change_status(conn, "missing", "confirmed")
    assert not missing.success
    assert missing.data["kind"] == "NotFoundError"
