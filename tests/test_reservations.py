"""
Tests for the reservation lifecycle.
"""

from datetime import datetime, timedelta

import pytest

from fitandflex.core.config import settings
from fitandflex.models import FitnessClass, Reservation, ReservationStatus


def _reserve(client, headers, user, schedule):
    return client.post(
        "/api/reservations",
        headers=headers,
        json={"id_user": user.id_user, "id_schedule": schedule.id_schedule},
    )


class TestCreateReservation:
    """Ordered checks applied when booking."""

    def test_capacity_two_scenario(
        self,
        client,
        member,
        other_member,
        member_headers,
        other_member_headers,
        make_schedule,
    ):
        """Reserve, duplicate, second member, cancel, then one spot left."""
        schedule = make_schedule()

        first = _reserve(client, member_headers, member, schedule)
        assert first.status_code == 201
        assert first.json()["data"]["status"] == "ACTIVE"

        duplicate = _reserve(client, member_headers, member, schedule)
        assert duplicate.status_code == 400

        second = _reserve(client, other_member_headers, other_member, schedule)
        assert second.status_code == 201
        assert second.json()["data"]["status"] == "ACTIVE"

        reservation_id = first.json()["data"]["id_reservation"]
        canceled = client.put(
            f"/api/reservations/{reservation_id}/cancel", headers=member_headers
        )
        assert canceled.status_code == 200
        assert canceled.json()["data"]["status"] == "CANCELED"

        availability = client.get(
            f"/api/schedules/{schedule.id_schedule}/availability", headers=member_headers
        )
        assert availability.json()["data"]["available_spots"] == 1

    def test_past_schedule_rejected(self, client, member, member_headers, make_schedule):
        schedule = make_schedule(days=-1)
        response = _reserve(client, member_headers, member, schedule)
        assert response.status_code == 400

    def test_inactive_schedule_rejected(self, client, member, member_headers, make_schedule):
        schedule = make_schedule(active=False)
        response = _reserve(client, member_headers, member, schedule)
        assert response.status_code == 400

    def test_unknown_schedule(self, client, member, member_headers):
        response = client.post(
            "/api/reservations",
            headers=member_headers,
            json={"id_user": member.id_user, "id_schedule": 4242},
        )
        assert response.status_code == 404

    def test_same_start_time_in_another_class_rejected(
        self, client, db_session, member, member_headers, seed_class, make_schedule
    ):
        """A member cannot be in two places at once."""
        yoga = FitnessClass(name="Yoga", capacity=10, active=True, id_branch=seed_class.id_branch)
        db_session.add(yoga)
        db_session.commit()

        spinning_slot = make_schedule(days=2)
        yoga_slot = make_schedule(days=2, fitness_class=yoga)
        yoga_slot.start_time = spinning_slot.start_time
        yoga_slot.end_time = spinning_slot.end_time
        db_session.commit()

        assert _reserve(client, member_headers, member, spinning_slot).status_code == 201
        response = _reserve(client, member_headers, member, yoga_slot)
        assert response.status_code == 400
        assert "time" in response.json()["message"]

    def test_member_cannot_book_for_someone_else(
        self, client, member_headers, other_member, make_schedule
    ):
        schedule = make_schedule()
        response = _reserve(client, member_headers, other_member, schedule)
        assert response.status_code == 403

    def test_capacity_not_enforced_by_default(
        self, client, make_user, login_as, seed_branch, make_schedule
    ):
        """Without the capacity flag a full class still accepts bookings."""
        schedule = make_schedule()
        for index in range(3):
            user = make_user(f"member{index}@fitandflex.com", "USER", seed_branch.id_branch)
            assert _reserve(client, login_as(user), user, schedule).status_code == 201

    def test_capacity_enforced_when_enabled(
        self, client, monkeypatch, make_user, login_as, seed_branch, make_schedule
    ):
        monkeypatch.setattr(settings, "ENFORCE_RESERVATION_CAPACITY", True)
        schedule = make_schedule()
        statuses = []
        for index in range(3):
            user = make_user(f"member{index}@fitandflex.com", "USER", seed_branch.id_branch)
            statuses.append(_reserve(client, login_as(user), user, schedule).status_code)
        assert statuses == [201, 201, 400]


@pytest.fixture
def reservation(db_session, member, make_schedule):
    """An ACTIVE reservation on a schedule starting tomorrow."""
    schedule = make_schedule()
    reservation = Reservation(
        id_user=member.id_user,
        id_schedule=schedule.id_schedule,
        reservation_date=schedule.start_time,
        status=ReservationStatus.ACTIVE.value,
    )
    db_session.add(reservation)
    db_session.commit()
    db_session.refresh(reservation)
    return reservation


class TestReservationTransitions:
    """Only ACTIVE reservations move to another state."""

    @pytest.mark.parametrize("final_status", ["CANCELED", "ATTENDED", "NO_SHOW"])
    def test_cancel_from_terminal_state_fails(
        self, client, db_session, member_headers, reservation, final_status
    ):
        reservation.status = final_status
        db_session.commit()
        response = client.put(
            f"/api/reservations/{reservation.id_reservation}/cancel", headers=member_headers
        )
        assert response.status_code == 400

    def test_cancel_after_schedule_started_fails(
        self, client, db_session, member_headers, reservation
    ):
        schedule = reservation.schedule
        schedule.start_time = datetime.now().replace(microsecond=0) - timedelta(minutes=10)
        schedule.end_time = schedule.start_time + timedelta(hours=1)
        db_session.commit()
        response = client.put(
            f"/api/reservations/{reservation.id_reservation}/cancel", headers=member_headers
        )
        assert response.status_code == 400
        assert "already started" in response.json()["message"]
        db_session.refresh(reservation)
        assert reservation.status == "ACTIVE"

    def test_instructor_marks_attendance(self, client, instructor_headers, reservation):
        response = client.put(
            f"/api/reservations/{reservation.id_reservation}/attended",
            headers=instructor_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "ATTENDED"

    def test_branch_admin_confined_to_branch(
        self, client, db_session, branch_admin_headers, member, make_schedule, other_branch
    ):
        remote_class = FitnessClass(
            name="Boxing", capacity=5, active=True, id_branch=other_branch.id_branch
        )
        db_session.add(remote_class)
        db_session.commit()
        schedule = make_schedule(fitness_class=remote_class)
        remote = Reservation(
            id_user=member.id_user,
            id_schedule=schedule.id_schedule,
            reservation_date=schedule.start_time,
            status=ReservationStatus.ACTIVE.value,
        )
        db_session.add(remote)
        db_session.commit()
        response = client.put(
            f"/api/reservations/{remote.id_reservation}/attended",
            headers=branch_admin_headers,
        )
        assert response.status_code == 403

    def test_member_cannot_mark_attendance(self, client, member_headers, reservation):
        response = client.put(
            f"/api/reservations/{reservation.id_reservation}/attended", headers=member_headers
        )
        assert response.status_code == 403

    def test_no_show_then_attended_fails(self, client, admin_headers, reservation):
        first = client.put(
            f"/api/reservations/{reservation.id_reservation}/no-show", headers=admin_headers
        )
        assert first.status_code == 200
        assert first.json()["data"]["status"] == "NO_SHOW"

        second = client.put(
            f"/api/reservations/{reservation.id_reservation}/attended", headers=admin_headers
        )
        assert second.status_code == 400

    def test_attended_reservation_cannot_be_deleted(self, client, admin_headers, reservation):
        client.put(
            f"/api/reservations/{reservation.id_reservation}/attended", headers=admin_headers
        )
        response = client.delete(
            f"/api/reservations/{reservation.id_reservation}", headers=admin_headers
        )
        assert response.status_code == 409

    def test_delete_active_reservation(self, client, admin_headers, reservation):
        response = client.delete(
            f"/api/reservations/{reservation.id_reservation}", headers=admin_headers
        )
        assert response.status_code == 200
        missing = client.get(
            f"/api/reservations/{reservation.id_reservation}", headers=admin_headers
        )
        assert missing.status_code == 404


class TestReservationQueries:
    """Per-user listings, existence checks and stats."""

    def test_future_and_past(self, client, db_session, member, member_headers, make_schedule):
        upcoming = make_schedule(days=2)
        finished = make_schedule(days=-2)
        for schedule in (upcoming, finished):
            db_session.add(
                Reservation(
                    id_user=member.id_user,
                    id_schedule=schedule.id_schedule,
                    reservation_date=schedule.start_time,
                    status=ReservationStatus.ACTIVE.value,
                )
            )
        db_session.commit()

        future = client.get(f"/api/reservations/user/{member.id_user}/future", headers=member_headers)
        past = client.get(f"/api/reservations/user/{member.id_user}/past", headers=member_headers)
        assert [r["id_schedule"] for r in future.json()["data"]] == [upcoming.id_schedule]
        assert [r["id_schedule"] for r in past.json()["data"]] == [finished.id_schedule]

    def test_exists(self, client, member_headers, member, reservation):
        response = client.get(
            f"/api/reservations/exists?user_id={member.id_user}&schedule_id={reservation.id_schedule}",
            headers=member_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["exists"] is True

    def test_user_stats(self, client, member_headers, member, reservation):
        response = client.get(f"/api/reservations/user/{member.id_user}/stats", headers=member_headers)
        assert response.status_code == 200
        stats = response.json()["data"]
        assert stats["total"] == 1
        assert stats["active"] == 1

    def test_member_sees_only_own_listing(self, client, member_headers, other_member):
        response = client.get(f"/api/reservations/user/{other_member.id_user}", headers=member_headers)
        assert response.status_code == 403
