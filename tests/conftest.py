import datetime

import pytest

from tablelink_app.db import init_db
from tablelink_app.restaurants import create_restaurant

TOMORROW = datetime.date.today() + datetime.timedelta(days=1)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "tablelink-test.db")


@pytest.fixture
def conn(db_path):
    conn = init_db(db_path)
    yield conn
    conn.close()


@pytest.fixture
def make_restaurant(conn):
    def _make(max_capacity=None, owner_id="owner-1", **details):
        details.setdefault("name", "Casa Lucía")
        details.setdefault("address", "Calle Mayor 1")
        details.setdefault("city", "Madrid")
        details.setdefault("phone", "+34 600 000 000")
        return create_restaurant(conn, owner_id, max_capacity=max_capacity, **details)
    return _make


@pytest.fixture
def restaurant_id(make_restaurant):
    return make_restaurant(max_capacity=10)


@pytest.fixture
def make_form():
    def _make(restaurant_id, **overrides):
        form = {
            "restaurant_id": restaurant_id,
            "customer_name": "Ana García",
            "customer_email": "ana@example.com",
            "customer_phone": "+34 611 222 333",
            "reservation_date": TOMORROW.isoformat(),
            "reservation_time": "20:00",
            "number_of_guests": 2,
            "special_requests": "",
        }
        form.update(overrides)
        return form
    return _make
