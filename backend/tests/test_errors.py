"""
Integrity failures map to 409 only for duplicate keys; other constraint
failures are bad input (400).
"""

import pytest
from sqlalchemy.exc import IntegrityError

from office_beverages.errors import is_unique_violation
from office_beverages.models import Beverage, User


def _flush_error(db_session, obj) -> IntegrityError:
    db_session.add(obj)
    with pytest.raises(IntegrityError) as excinfo:
        db_session.flush()
    db_session.rollback()
    return excinfo.value


def _render(app, error):
    with app.test_request_context():
        return app.make_response(app.handle_user_exception(error))


@pytest.fixture
def duplicate_username(db_session, seed):
    return _flush_error(db_session, User(
        username="ahmed",
        email="someone.else@company.com",
        full_name="Another Ahmed",
        password_hash="x",
        role="employee",
    ))


@pytest.fixture
def missing_name(db_session, seed):
    return _flush_error(db_session, Beverage(name=None, category="coffee"))


class TestIntegrityErrors:

    def test_duplicate_key_is_unique_violation(self, duplicate_username):
        assert is_unique_violation(duplicate_username) is True

    def test_not_null_is_not_unique_violation(self, missing_name):
        assert is_unique_violation(missing_name) is False

    def test_duplicate_key_renders_409(self, app, duplicate_username):
        resp = _render(app, duplicate_username)
        assert resp.status_code == 409
        assert resp.json == {"success": False, "message": "Resource already exists"}

    def test_constraint_failure_renders_400(self, app, missing_name):
        resp = _render(app, missing_name)
        assert resp.status_code == 400
        assert resp.json == {"success": False, "message": "Invalid data"}
