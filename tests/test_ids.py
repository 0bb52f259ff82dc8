import pytest

from models.user import User
from utils.ids import MAX_ID, get_by_id, parse_id


@pytest.mark.parametrize("raw, expected", [
    (7, 7),
    ("42", 42),
    (" 42 ", 42),
    (MAX_ID, MAX_ID),
    (str(MAX_ID), MAX_ID),
])
def test_parse_id_accepts_row_ids(raw, expected):
    assert parse_id(raw) == expected


@pytest.mark.parametrize("raw", [
    0, -3, MAX_ID + 1, 99999999999999999999, "99999999999999999999",
    True, None, 4.0, "4.0", "abc", "", "\u0663", [1],
])
def test_parse_id_rejects_unusable_values(raw):
    assert parse_id(raw) is None


def test_get_by_id(app, customer):
    with app.app_context():
        assert get_by_id(User, customer).id == customer
        assert get_by_id(User, str(customer)).id == customer
        assert get_by_id(User, 2 ** 64) is None
        assert get_by_id(User, customer + 1000) is None
