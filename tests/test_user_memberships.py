"""
Tests for membership assignment, derived state and payments.
"""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from fitandflex.models import MembershipStatus, Payment, Product, UserMembership


def _assign(client, headers, user, product, **extra):
    body = {"id_user": user.id_user, "id_product": product.id_product}
    body.update(extra)
    return client.post("/api/user-memberships", headers=headers, json=body)


@pytest.fixture
def membership(db_session, member, seed_product):
    """An ACTIVE, unpaid membership running for thirty days."""
    start = datetime.now().replace(microsecond=0)
    membership = UserMembership(
        id_user=member.id_user,
        id_product=seed_product.id_product,
        start_date=start,
        end_date=start + timedelta(days=30),
        status=MembershipStatus.ACTIVE.value,
        active=True,
        total_amount=Decimal("100.00"),
        paid_amount=Decimal("0"),
    )
    db_session.add(membership)
    db_session.commit()
    db_session.refresh(membership)
    return membership


class TestMembershipModel:
    """Read-time state derived from the end date."""

    def _membership(self, end_date, status=MembershipStatus.ACTIVE.value, active=True):
        return UserMembership(
            start_date=end_date - timedelta(days=30),
            end_date=end_date,
            status=status,
            active=active,
            total_amount=Decimal("100"),
            paid_amount=Decimal("40"),
        )

    def test_expired_regardless_of_status(self):
        """A stored ACTIVE membership past its end date reads as expired."""
        end = datetime(2024, 1, 31, 12, 0)
        membership = self._membership(end)
        assert not membership.is_expired(at=end)
        assert membership.is_expired(at=end + timedelta(seconds=1))
        assert membership.status == "ACTIVE"
        assert membership.effective_status(at=end + timedelta(days=1)) == "EXPIRED"
        assert not membership.is_currently_active(at=end + timedelta(days=1))

    def test_active_requires_flag_status_and_date(self):
        end = datetime(2024, 1, 31)
        at = end - timedelta(days=5)
        assert self._membership(end).is_currently_active(at=at)
        assert not self._membership(end, active=False).is_currently_active(at=at)
        assert not self._membership(end, status="SUSPENDED").is_currently_active(at=at)

    def test_days_remaining_rounds_up(self):
        end = datetime(2024, 1, 31, 12, 0)
        membership = self._membership(end)
        assert membership.days_remaining(at=end - timedelta(days=2, hours=1)) == 3
        assert membership.days_remaining(at=end + timedelta(days=1)) == 0

    def test_pending_amount(self):
        membership = self._membership(datetime(2024, 1, 31))
        assert membership.pending_amount == Decimal("60")
        assert not membership.fully_paid
        membership.paid_amount = Decimal("120")
        assert membership.pending_amount == Decimal("0")
        assert membership.fully_paid

    def test_any_state_reachable(self):
        membership = self._membership(datetime(2024, 1, 31))
        membership.cancel()
        assert (membership.status, membership.active) == ("CANCELLED", False)
        membership.activate()
        assert (membership.status, membership.active) == ("ACTIVE", True)
        membership.expire()
        membership.suspend()
        assert membership.status == "SUSPENDED"


class TestAssignMembership:
    """POST /api/user-memberships"""

    def test_assign_with_initial_payment(self, client, admin_headers, member, seed_product, super_admin):
        response = _assign(
            client, admin_headers, member, seed_product,
            initial_payment="30.00", payment_method="CARD",
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "ACTIVE"
        assert data["currently_active"] is True
        assert data["id_assigned_by"] == super_admin.id_user
        assert Decimal(data["total_amount"]) == Decimal("100")
        assert Decimal(data["paid_amount"]) == Decimal("30")
        assert Decimal(data["pending_amount"]) == Decimal("70")

        start = datetime.fromisoformat(data["start_date"])
        end = datetime.fromisoformat(data["end_date"])
        assert end - start == timedelta(days=30)

        payments = client.get(f"/api/payments/user/{member.id_user}", headers=admin_headers)
        content = payments.json()["data"]["content"]
        assert len(content) == 1
        assert content[0]["status"] == "COMPLETED"
        assert content[0]["id_user_membership"] == data["id_user_membership"]

    def test_second_active_membership_rejected(self, client, admin_headers, member, seed_product):
        assert _assign(client, admin_headers, member, seed_product).status_code == 201
        response = _assign(client, admin_headers, member, seed_product)
        assert response.status_code == 400

    def test_overdue_active_membership_still_blocks_assignment(
        self, client, db_session, admin_headers, member, seed_product, membership
    ):
        membership.end_date = datetime.now() - timedelta(days=1)
        db_session.commit()
        response = _assign(client, admin_headers, member, seed_product)
        assert response.status_code == 400
        db_session.refresh(membership)
        assert membership.status == "ACTIVE"

    def test_assignment_allowed_after_expire_overdue(
        self, client, db_session, admin_headers, member, seed_product, membership
    ):
        membership.end_date = datetime.now() - timedelta(days=1)
        db_session.commit()
        client.post("/api/user-memberships/expire-overdue", headers=admin_headers)
        assert _assign(client, admin_headers, member, seed_product).status_code == 201

    def test_inactive_product_rejected(self, client, db_session, admin_headers, member, seed_product):
        seed_product.active = False
        db_session.commit()
        assert _assign(client, admin_headers, member, seed_product).status_code == 400

    def test_start_after_end_rejected(self, client, admin_headers, member, seed_product):
        now = datetime.now()
        response = _assign(
            client, admin_headers, member, seed_product,
            start_date=now.isoformat(),
            end_date=(now - timedelta(days=1)).isoformat(),
        )
        assert response.status_code == 400

    def test_member_cannot_assign(self, client, member_headers, member, seed_product):
        assert _assign(client, member_headers, member, seed_product).status_code == 403

    def test_branch_admin_confined_to_branch(
        self, client, db_session, branch_admin_headers, member, seed_product, other_branch
    ):
        remote_product = Product(
            name="Uptown Pass", sku="UPT0001", price=80, duration_days=30, active=True,
            id_branch=other_branch.id_branch,
        )
        db_session.add(remote_product)
        db_session.commit()
        assert _assign(client, branch_admin_headers, member, remote_product).status_code == 403
        assert _assign(client, branch_admin_headers, member, seed_product).status_code == 201


class TestMembershipLifecycle:
    """Status changes, extension, payments and reconciliation."""

    def test_extend_appends_note(self, client, admin_headers, membership):
        original_end = membership.end_date
        response = client.put(
            f"/api/user-memberships/{membership.id_user_membership}/extend",
            headers=admin_headers,
            json={"days": 15, "reason": "Injury"},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert datetime.fromisoformat(data["end_date"]) == original_end + timedelta(days=15)
        assert "Extended by 15 days: Injury" in data["notes"]

    def test_change_status_records_reason(self, client, admin_headers, membership):
        response = client.put(
            f"/api/user-memberships/{membership.id_user_membership}/status",
            headers=admin_headers,
            json={"status": "SUSPENDED", "reason": "Travelling"},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "SUSPENDED"
        assert data["active"] is False
        assert "Travelling" in data["notes"]

    def test_add_payment_reduces_pending(self, client, admin_headers, membership):
        url = f"/api/user-memberships/{membership.id_user_membership}/payment"
        first = client.post(url, headers=admin_headers, json={"amount": "60"})
        assert first.status_code == 200
        assert Decimal(first.json()["data"]["pending_amount"]) == Decimal("40")

        too_much = client.post(url, headers=admin_headers, json={"amount": "50"})
        assert too_much.status_code == 400

        rest = client.post(url, headers=admin_headers, json={"amount": "40"})
        assert rest.json()["data"]["fully_paid"] is True

        closed = client.post(url, headers=admin_headers, json={"amount": "1"})
        assert closed.status_code == 400

    def test_refund_and_delete_resync_paid_amount(
        self, client, db_session, admin_headers, member, seed_product
    ):
        assigned = _assign(client, admin_headers, member, seed_product, initial_payment="60")
        membership_id = assigned.json()["data"]["id_user_membership"]
        payment = (
            db_session.query(Payment)
            .filter(Payment.id_user_membership == membership_id)
            .one()
        )

        refunded = client.put(
            f"/api/payments/{payment.id_payment}/refund",
            headers=admin_headers,
            json={"amount": "20", "reason": "Partial refund"},
        )
        assert refunded.status_code == 200
        assert refunded.json()["data"]["status"] == "PARTIALLY_REFUNDED"

        url = f"/api/user-memberships/{membership_id}"
        data = client.get(url, headers=admin_headers).json()["data"]
        assert Decimal(data["paid_amount"]) == Decimal("40")
        assert Decimal(data["pending_amount"]) == Decimal("60")

        deleted = client.delete(f"/api/payments/{payment.id_payment}", headers=admin_headers)
        assert deleted.status_code == 200
        data = client.get(url, headers=admin_headers).json()["data"]
        assert Decimal(data["paid_amount"]) == Decimal("0")
        assert Decimal(data["pending_amount"]) == Decimal("100")

    def test_pending_summary(self, client, member_headers, member, membership):
        response = client.get(
            f"/api/user-memberships/user/{member.id_user}/summary", headers=member_headers
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["memberships_with_balance"] == 1
        assert Decimal(data["pending_amount"]) == Decimal("100")

    def test_expired_by_date_reported_on_read(self, client, db_session, member_headers, member, membership):
        membership.end_date = datetime.now() - timedelta(hours=1)
        db_session.commit()
        response = client.get(
            f"/api/user-memberships/{membership.id_user_membership}", headers=member_headers
        )
        data = response.json()["data"]
        assert data["status"] == "ACTIVE"
        assert data["current_status"] == "EXPIRED"
        assert data["expired"] is True
        assert data["currently_active"] is False

        has_active = client.get(
            f"/api/user-memberships/user/{member.id_user}/has-active", headers=member_headers
        )
        assert has_active.json()["data"]["has_active_membership"] is False

    def test_expire_overdue(self, client, db_session, admin_headers, membership):
        membership.end_date = datetime.now() - timedelta(days=2)
        db_session.commit()
        response = client.post("/api/user-memberships/expire-overdue", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["membership_ids"] == [membership.id_user_membership]
        db_session.refresh(membership)
        assert membership.status == "EXPIRED"
        assert membership.active is False

    def test_expiring_window(self, client, admin_headers, membership):
        soon = client.get("/api/user-memberships/expiring?days=45", headers=admin_headers)
        later = client.get("/api/user-memberships/expiring?days=7", headers=admin_headers)
        assert [m["id_user_membership"] for m in soon.json()["data"]] == [
            membership.id_user_membership
        ]
        assert later.json()["data"] == []

    def test_member_cannot_read_other_memberships(self, client, other_member_headers, member, membership):
        response = client.get(
            f"/api/user-memberships/user/{member.id_user}", headers=other_member_headers
        )
        assert response.status_code == 403
