"""
CLI command tests via Flask's CLI runner.
"""

import pytest

from office_beverages.models import Beverage, User


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


class TestSystemCommands:

    def test_init_seeds_empty_database(self, runner, db_session):
        result = runner.invoke(args=["system", "init"])

        assert result.exit_code == 0
        assert "PASS Created 4 users and 12 beverages" in result.output
        assert db_session.query(User).count() == 4
        assert db_session.query(Beverage).count() == 12

    def test_init_skips_when_users_exist(self, runner, seed):
        result = runner.invoke(args=["system", "init"])

        assert result.exit_code == 0
        assert "skipping seed" in result.output


class TestUserCommands:

    def test_list_by_role(self, runner, seed):
        result = runner.invoke(args=["users", "list", "--role", "office_boy"])

        assert result.exit_code == 0
        assert "officeBoy" in result.output
        assert "ahmed" not in result.output

    def test_create(self, runner, db_session, seed):
        result = runner.invoke(args=[
            "users", "create",
            "--username", "mona",
            "--email", "mona@company.com",
            "--full-name", "Mona Ali",
            "--password", "mona1234",
            "--department", "Sales",
        ])

        assert result.exit_code == 0, result.output
        assert "PASS Created user: mona" in result.output
        assert db_session.query(User).filter_by(username="mona").one().role == "employee"

    def test_create_reports_validation_errors(self, runner, seed):
        result = runner.invoke(args=[
            "users", "create",
            "--username", "ahmed",
            "--email", "bad-email",
            "--full-name", "Dup",
            "--password", "short",
        ])

        assert result.exit_code == 1
        assert "FAIL Validation failed" in result.output
        assert "email: Invalid email format" in result.output
        assert "password: Password must be at least 6 characters" in result.output


class TestSessionCommands:

    def test_cleanup(self, runner, seed):
        result = runner.invoke(args=["sessions", "cleanup", "--days", "30"])

        assert result.exit_code == 0
        assert "Deleted 0 ended session(s)" in result.output
