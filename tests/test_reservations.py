import pytest

from tablelink_app.errors import CapacityExceededError, InvalidTransitionError, NotFoundError, PersistenceError
from tablelink_app.intake import build_candidate
from tablelink_app.models import ReservationStatus
from tablelink_app.reservations import (
    admit_reservation,
    count_by_status,
    create_reservation,
    get_reservation,
    list_reservations,
    update_reservation_status,
)


def test_create_stores_pending(conn, restaurant_id, make_form):
    reservation_id = create_reservation(conn, build_candidate(make_form(restaurant_id)))
    reservation = get_reservation(conn, reservation_id)
    assert reservation.status is ReservationStatus.PENDING
    assert reservation.customer_email == "ana@example.com"
    assert reservation.created_at


def test_create_for_unknown_restaurant_fails(conn, make_form):
    with pytest.raises(PersistenceError):
        create_reservation(conn, build_candidate(make_form("no-such-restaurant")))


def test_admit_rejects_when_full(conn, restaurant_id, make_form):
    admit_reservation(conn, build_candidate(make_form(restaurant_id, number_of_guests=8)))
    with pytest.raises(CapacityExceededError):
        admit_reservation(conn, build_candidate(make_form(restaurant_id, number_of_guests=3)))
    assert len(list_reservations(conn, restaurant_id)) == 1


def test_list_is_ordered_by_slot(conn, restaurant_id, make_form):
    for date, time in [("2099-05-02", "13:00"), ("2099-05-01", "21:00"), ("2099-05-01", "19:30")]:
        create_reservation(conn, build_candidate(make_form(restaurant_id, reservation_date=date, reservation_time=time)))

    slots = [(r.reservation_date, r.reservation_time) for r in list_reservations(conn, restaurant_id)]
    assert slots == [("2099-05-01", "19:30"), ("2099-05-01", "21:00"), ("2099-05-02", "13:00")]


def test_list_is_repeatable(conn, restaurant_id, make_form):
    for _ in range(3):
        create_reservation(conn, build_candidate(make_form(restaurant_id)))
    assert list_reservations(conn, restaurant_id) == list_reservations(conn, restaurant_id)


def test_list_only_includes_own_restaurant(conn, restaurant_id, make_restaurant, make_form):
    other = make_restaurant(owner_id="owner-2", name="Other")
    create_reservation(conn, build_candidate(make_form(other)))
    assert list_reservations(conn, restaurant_id) == []


@pytest.mark.parametrize("path", [
    ["confirmed"],
    ["cancelled"],
    ["confirmed", "cancelled"],
])
def test_allowed_transitions(conn, restaurant_id, make_form, path):
    reservation_id = create_reservation(conn, build_candidate(make_form(restaurant_id)))
    for status in path:
        assert update_reservation_status(conn, reservation_id, status).status.value == status
    assert get_reservation(conn, reservation_id).status.value == path[-1]


@pytest.mark.parametrize("path,bad", [
    (["cancelled"], "pending"),
    (["cancelled"], "confirmed"),
    (["cancelled"], "cancelled"),
    (["confirmed"], "pending"),
    (["confirmed"], "confirmed"),
    ([], "pending"),
    ([], "seated"),
])
def test_rejected_transitions(conn, restaurant_id, make_form, path, bad):
    reservation_id = create_reservation(conn, build_candidate(make_form(restaurant_id)))
    for status in path:
        update_reservation_status(conn, reservation_id, status)
    with pytest.raises(InvalidTransitionError):
        update_reservation_status(conn, reservation_id, bad)


def test_status_change_scoped_to_restaurant(conn, restaurant_id, make_restaurant, make_form):
    other = make_restaurant(owner_id="owner-2", name="Other")
    reservation_id = create_reservation(conn, build_candidate(make_form(restaurant_id)))
    with pytest.raises(NotFoundError):
        update_reservation_status(conn, reservation_id, "confirmed", restaurant_id=other)
    assert get_reservation(conn, reservation_id).status is ReservationStatus.PENDING


def test_unknown_reservation(conn):
    with pytest.raises(NotFoundError):
        update_reservation_status(conn, "nope", "confirmed")


def test_count_by_status(conn, restaurant_id, make_form):
    ids = [create_reservation(conn, build_candidate(make_form(restaurant_id))) for _ in range(3)]
    update_reservation_status(conn, ids[0], "confirmed")
    update_reservation_status(conn, ids[1], "cancelled")
    assert count_by_status(conn, restaurant_id) == {"pending": 1, "confirmed": 1, "cancelled": 1}
