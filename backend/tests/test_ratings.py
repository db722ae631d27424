"""
Rating tests: one rating per employee and beverage, anonymous authors,
aggregates and the top-rated threshold.
"""

import pytest

from conftest import auth_headers, get_auth_token
from office_beverages.models import Rating


def _rate(client, headers, beverage_id, rating, **extra):
    body = {"beverageId": beverage_id, "rating": rating, **extra}
    return client.post("/api/ratings", json=body, headers=headers)


class TestUpsertRating:

    def test_first_rating_created(self, client, seed, employee_headers):
        latte = seed["beverages"]["Latte"]
        resp = _rate(client, employee_headers, latte.id, 4, review="Smooth")

        assert resp.status_code == 200
        data = resp.json["data"]
        assert data["rating"]["rating"] == 4
        assert data["rating"]["review"] == "Smooth"
        assert data["averageRating"] == {"averageRating": 4.0, "totalRatings": 1}

    def test_second_submission_overwrites(self, client, db_session, seed, employee_headers):
        latte = seed["beverages"]["Latte"]
        _rate(client, employee_headers, latte.id, 2, review="Too bitter")
        resp = _rate(client, employee_headers, latte.id, 5)

        assert resp.status_code == 200
        assert resp.json["data"]["averageRating"]["totalRatings"] == 1

        db_session.expire_all()
        rows = db_session.query(Rating).filter_by(beverage_id=latte.id).all()
        assert len(rows) == 1
        assert rows[0].rating == 5
        assert rows[0].review is None

    @pytest.mark.parametrize("score", [0, 6, "five", None])
    def test_out_of_range_rejected(self, client, seed, employee_headers, score):
        resp = _rate(client, employee_headers, seed["beverages"]["Latte"].id, score)
        assert resp.status_code == 400
        assert resp.json["errors"][0]["field"] == "rating"

    def test_review_length_limit(self, client, seed, employee_headers):
        resp = _rate(client, employee_headers, seed["beverages"]["Latte"].id, 3, review="x" * 501)
        assert resp.status_code == 400
        assert resp.json["errors"][0]["message"] == "Review cannot exceed 500 characters"

    def test_unknown_beverage_404(self, client, seed, employee_headers):
        assert _rate(client, employee_headers, 99999, 3).status_code == 404


class TestReadRatings:

    def test_anonymous_author_hidden(self, client, seed, employee_headers, other_employee_headers):
        tea = seed["beverages"]["Green Tea"]
        _rate(client, employee_headers, tea.id, 5, isAnonymous=True)
        _rate(client, other_employee_headers, tea.id, 3)

        resp = client.get(f"/api/ratings/beverage/{tea.id}", headers=employee_headers)
        assert resp.status_code == 200
        data = resp.json["data"]
        assert data["averageRating"] == 4.0
        assert data["totalRatings"] == 2
        assert data["distribution"] == {"5": 1, "4": 0, "3": 1, "2": 0, "1": 0}

        authors = {r["employee"]["full_name"] for r in data["ratings"]}
        assert authors == {"Anonymous user", "Sara Mohamed"}
        anonymous = next(r for r in data["ratings"] if r["is_anonymous"])
        assert anonymous["employee_id"] is None

    def test_my_rating_and_details(self, client, seed, employee_headers):
        tea = seed["beverages"]["Mint Tea"]
        empty = client.get(f"/api/ratings/beverage/{tea.id}/my-rating", headers=employee_headers)
        assert empty.json["data"] == {"rating": None}

        _rate(client, employee_headers, tea.id, 4, review="Fresh")

        mine = client.get(f"/api/ratings/beverage/{tea.id}/my-rating", headers=employee_headers)
        assert mine.json["data"]["rating"]["rating"] == 4

        details = client.get(f"/api/ratings/beverage/{tea.id}/details", headers=employee_headers)
        assert details.json["data"]["userRating"] == {"rating": 4, "review": "Fresh"}
        assert details.json["data"]["name"] == "Mint Tea"

    def test_my_ratings_lists_only_mine(self, client, seed, employee_headers, other_employee_headers):
        _rate(client, employee_headers, seed["beverages"]["Latte"].id, 4)
        _rate(client, other_employee_headers, seed["beverages"]["Espresso"].id, 2)

        resp = client.get("/api/ratings/my-ratings", headers=employee_headers)
        assert [r["beverage"]["name"] for r in resp.json["data"]] == ["Latte"]


class TestTopRated:

    def test_requires_three_ratings(self, client, seed, admin_headers, office_boy_headers, employee_headers):
        espresso = seed["beverages"]["Espresso"]
        latte = seed["beverages"]["Latte"]
        for headers in (admin_headers, office_boy_headers, employee_headers):
            _rate(client, headers, espresso.id, 4)
        _rate(client, employee_headers, latte.id, 5)
        _rate(client, office_boy_headers, latte.id, 5)

        resp = client.get("/api/ratings/top-rated", headers=employee_headers)
        assert resp.status_code == 200
        top = resp.json["data"]
        assert [row["beverage"]["name"] for row in top] == ["Espresso"]
        assert top[0]["averageRating"] == 4.0
        assert top[0]["totalRatings"] == 3

    def test_statistics(self, client, seed, employee_headers, other_employee_headers):
        _rate(client, employee_headers, seed["beverages"]["Latte"].id, 5)
        _rate(client, other_employee_headers, seed["beverages"]["Latte"].id, 2)

        resp = client.get("/api/ratings/statistics", headers=employee_headers)
        stats = resp.json["data"]
        assert stats["totalRatings"] == 2
        assert stats["averageRating"] == 3.5
        assert stats["highestRating"] == 5
        assert stats["lowestRating"] == 2
        assert stats["topRatedBeverages"] == []


class TestDeleteRating:

    def test_delete_own_rating(self, client, seed, employee_headers):
        latte = seed["beverages"]["Latte"]
        _rate(client, employee_headers, latte.id, 3)

        resp = client.delete(f"/api/ratings/beverage/{latte.id}", headers=employee_headers)
        assert resp.status_code == 200
        assert resp.json["data"]["averageRating"] == {"averageRating": 0, "totalRatings": 0}

    def test_delete_missing_404(self, client, seed, employee_headers):
        resp = client.delete(f"/api/ratings/beverage/{seed['beverages']['Latte'].id}", headers=employee_headers)
        assert resp.status_code == 404
        assert resp.json["message"] == "Rating not found"

    def test_cannot_delete_someone_elses(self, client, seed, employee_headers):
        latte = seed["beverages"]["Latte"]
        sara = auth_headers(get_auth_token(client, "sara", "sara123"))
        _rate(client, sara, latte.id, 3)

        resp = client.delete(f"/api/ratings/beverage/{latte.id}", headers=employee_headers)
        assert resp.status_code == 404
