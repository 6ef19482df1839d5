"""
Tests for class subscriptions: recurrent/date exclusivity, dedupe and capacity.
"""

from datetime import date, timedelta

import pytest

from fitandflex.models import FitnessClass
from fitandflex.services.class_subscription_service import resolve_day_of_week

NEXT_MONDAY = date.today() + timedelta(days=7 - date.today().weekday())


def _payload(user, fitness_class, **overrides):
    payload = {
        "id_user": user.id_user,
        "id_class": fitness_class.id_class,
        "start_time": "18:00:00",
        "end_time": "19:00:00",
    }
    payload.update(overrides)
    return payload


class TestResolveDayOfWeek:
    """Pure validation of the recurrent/date combination."""

    def test_recurrent_with_date_rejected(self):
        with pytest.raises(ValueError):
            resolve_day_of_week(recurrent=True, on_date=NEXT_MONDAY, day_of_week=None)

    def test_neither_recurrent_nor_date_rejected(self):
        with pytest.raises(ValueError):
            resolve_day_of_week(recurrent=False, on_date=None, day_of_week=3)
        with pytest.raises(ValueError):
            resolve_day_of_week(recurrent=None, on_date=None, day_of_week=3)

    def test_day_derived_from_date(self):
        assert resolve_day_of_week(recurrent=None, on_date=NEXT_MONDAY, day_of_week=None) == 1
        assert (
            resolve_day_of_week(
                recurrent=False, on_date=NEXT_MONDAY + timedelta(days=6), day_of_week=None
            )
            == 7
        )

    def test_recurrent_requires_day(self):
        with pytest.raises(ValueError):
            resolve_day_of_week(recurrent=True, on_date=None, day_of_week=None)
        assert resolve_day_of_week(recurrent=True, on_date=None, day_of_week=5) == 5


class TestCreateSubscription:
    """POST /api/class-subscriptions"""

    def test_recurrent_and_date_rejected(self, client, member, member_headers, seed_class):
        response = client.post(
            "/api/class-subscriptions",
            headers=member_headers,
            json=_payload(member, seed_class, recurrent=True, date=NEXT_MONDAY.isoformat()),
        )
        assert response.status_code == 400

    def test_recurrent_subscription(self, client, member, member_headers, seed_class):
        response = client.post(
            "/api/class-subscriptions",
            headers=member_headers,
            json=_payload(member, seed_class, recurrent=True, day_of_week=2),
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["recurrent"] is True
        assert data["date"] is None
        assert data["day_of_week"] == 2

    def test_dated_subscription_derives_day(self, client, member, member_headers, seed_class):
        response = client.post(
            "/api/class-subscriptions",
            headers=member_headers,
            json=_payload(member, seed_class, date=NEXT_MONDAY.isoformat()),
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["recurrent"] is False
        assert data["day_of_week"] == 1

    def test_duplicate_active_rejected_and_cancelled_reactivated(
        self, client, member, member_headers, seed_class
    ):
        body = _payload(member, seed_class, recurrent=True, day_of_week=4)
        created = client.post("/api/class-subscriptions", headers=member_headers, json=body)
        assert created.status_code == 201
        subscription_id = created.json()["data"]["id_subscription"]

        again = client.post("/api/class-subscriptions", headers=member_headers, json=body)
        assert again.status_code == 400

        client.put(f"/api/class-subscriptions/{subscription_id}/cancel", headers=member_headers)
        revived = client.post("/api/class-subscriptions", headers=member_headers, json=body)
        assert revived.status_code == 201
        assert revived.json()["data"]["id_subscription"] == subscription_id
        assert revived.json()["data"]["active"] is True

    def test_dated_slot_capacity(
        self, client, make_user, login_as, seed_branch, seed_class
    ):
        """The class capacity caps subscriptions to one dated slot."""
        statuses = []
        for index in range(3):
            user = make_user(f"rider{index}@fitandflex.com", "USER", seed_branch.id_branch)
            response = client.post(
                "/api/class-subscriptions",
                headers=login_as(user),
                json=_payload(user, seed_class, date=NEXT_MONDAY.isoformat()),
            )
            statuses.append(response.status_code)
        assert statuses == [201, 201, 400]

    def test_inactive_class_rejected(self, client, db_session, member, member_headers, seed_class):
        seed_class.active = False
        db_session.commit()
        response = client.post(
            "/api/class-subscriptions",
            headers=member_headers,
            json=_payload(member, seed_class, recurrent=True, day_of_week=1),
        )
        assert response.status_code == 400

    def test_class_from_another_branch_forbidden(
        self, client, db_session, member, member_headers, other_branch
    ):
        remote = FitnessClass(name="Boxing", capacity=5, active=True, id_branch=other_branch.id_branch)
        db_session.add(remote)
        db_session.commit()
        response = client.post(
            "/api/class-subscriptions",
            headers=member_headers,
            json=_payload(member, remote, recurrent=True, day_of_week=1),
        )
        assert response.status_code == 403


class TestSubscriptionQueries:
    """Listing and date cancellation."""

    def test_cancel_for_date(self, client, member, member_headers, seed_class):
        client.post(
            "/api/class-subscriptions",
            headers=member_headers,
            json=_payload(member, seed_class, date=NEXT_MONDAY.isoformat()),
        )
        response = client.put(
            "/api/class-subscriptions/cancel-date",
            headers=member_headers,
            json={
                "id_user": member.id_user,
                "id_class": seed_class.id_class,
                "date": NEXT_MONDAY.isoformat(),
            },
        )
        assert response.status_code == 200
        assert response.json()["data"] == 1

        listing = client.get(f"/api/class-subscriptions/user/{member.id_user}", headers=member_headers)
        assert listing.json()["data"] == []

    def test_instructor_lists_class_users(
        self, client, member, member_headers, instructor_headers, seed_class
    ):
        client.post(
            "/api/class-subscriptions",
            headers=member_headers,
            json=_payload(member, seed_class, recurrent=True, day_of_week=3),
        )
        response = client.get(
            f"/api/class-subscriptions/class/{seed_class.id_class}/users",
            headers=instructor_headers,
        )
        assert response.status_code == 200
        assert [u["id_user"] for u in response.json()["data"]] == [member.id_user]

    def test_member_cannot_list_class_subscriptions(self, client, member_headers, seed_class):
        response = client.get(
            f"/api/class-subscriptions/class/{seed_class.id_class}", headers=member_headers
        )
        assert response.status_code == 403
