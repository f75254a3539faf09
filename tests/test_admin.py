from datetime import timedelta

import pytest
from sqlalchemy import select

from app.core.config import settings
from app.db.base import utcnow
from app.models.audit_log import AuditLog
from app.models.notification import Announcement, Notification
from app.models.property import ApprovalStatus, Property
from app.models.user import User, UserRole, UserStatus
from app.scripts.seed_admin import seed_admin

API = settings.API_V1_STR


# ==================== USERS ====================

def test_pending_users_listed_for_admin(client, auth, admin, make_user):
    pending = make_user(UserRole.BROKER, UserStatus.PENDING)
    make_user(UserRole.CUSTOMER)

    response = client.get(f"{API}/admin/users", headers=auth(admin), params={"status": "pending"})

    assert response.status_code == 200
    assert [u["id"] for u in response.json()["users"]] == [pending.id]


def test_user_listing_is_admin_only(client, auth, owner):
    assert client.get(f"{API}/admin/users", headers=auth(owner)).status_code == 403


def test_approve_and_reject_user(client, auth, db_session, admin, make_user):
    user = make_user(UserRole.PHOTOGRAPHER, UserStatus.PENDING)

    approved = client.patch(f"{API}/admin/users/{user.id}/approve", headers=auth(admin))
    assert approved.json() == {"ok": True, "userId": user.id, "status": "active"}

    # Approvals can be re-run in either direction
    rejected = client.patch(
        f"{API}/admin/users/{user.id}/reject", headers=auth(admin), json={"reason": "Portfolio missing"}
    )
    assert rejected.status_code == 200

    db_session.expire_all()
    assert db_session.get(User, user.id).status == UserStatus.REJECTED

    actions = db_session.execute(select(AuditLog.action).order_by(AuditLog.id)).scalars().all()
    assert actions == ["USER_APPROVED", "USER_REJECTED"]

    titles = db_session.execute(
        select(Notification.title).where(Notification.user_id == user.id).order_by(Notification.id)
    ).scalars().all()
    assert titles == ["Account approved", "Account rejected"]


def test_reject_requires_reason(client, auth, admin, make_user):
    user = make_user(UserRole.OWNER, UserStatus.PENDING)
    response = client.patch(f"{API}/admin/users/{user.id}/reject", headers=auth(admin), json={"reason": "no"})
    assert response.status_code == 400


def test_missing_user_is_404_even_for_non_admin(client, auth, owner):
    assert client.patch(f"{API}/admin/users/777/approve", headers=auth(owner)).status_code == 404


# ==================== PROPERTIES ====================

def test_property_approval_notifies_responsible_party(client, auth, db_session, admin, owner, broker,
                                                       make_property):
    prop = make_property(owner=owner, broker=broker, approval_status=ApprovalStatus.PENDING)

    listed = client.get(f"{API}/admin/properties", headers=auth(admin), params={"approval_status": "pending"})
    assert [p["id"] for p in listed.json()["properties"]] == [prop.id]

    response = client.patch(f"{API}/admin/properties/{prop.id}/approve", headers=auth(admin))
    assert response.json()["approval_status"] == "approved"

    db_session.expire_all()
    assert db_session.get(Property, prop.id).approval_status == ApprovalStatus.APPROVED
    notes = db_session.execute(select(Notification.user_id).where(Notification.title == "Listing approved")).scalars()
    assert list(notes) == [broker.id]


def test_property_rejection_records_reason(client, auth, db_session, admin, owner, make_property):
    prop = make_property(owner=owner)

    response = client.patch(
        f"{API}/admin/properties/{prop.id}/reject", headers=auth(admin), json={"reason": "Duplicate listing"}
    )

    assert response.status_code == 200
    audit = db_session.execute(select(AuditLog).where(AuditLog.action == "PROPERTY_REJECTED")).scalar_one()
    assert audit.meta == {"reason": "Duplicate listing"}
    assert audit.entity_id == prop.id


def test_non_admin_cannot_approve_property(client, auth, owner, make_property):
    prop = make_property(owner=owner, approval_status=ApprovalStatus.PENDING)
    assert client.patch(f"{API}/admin/properties/{prop.id}/approve", headers=auth(owner)).status_code == 403


# ==================== AUDIT LOGS ====================

def test_audit_log_filters(client, auth, db_session, admin, make_user):
    other = make_user(UserRole.ADMIN)
    db_session.add_all([
        AuditLog(actor_id=admin.id, action="USER_APPROVED", entity_type="user", entity_id=1),
        AuditLog(actor_id=other.id, action="USER_APPROVED", entity_type="user", entity_id=2),
        AuditLog(actor_id=admin.id, action="PROPERTY_APPROVED", entity_type="property", entity_id=3),
    ])
    db_session.commit()

    by_actor = client.get(f"{API}/admin/audit-logs", headers=auth(admin), params={"actorId": admin.id})
    by_action = client.get(f"{API}/admin/audit-logs", headers=auth(admin), params={"action": "USER_APPROVED"})
    future = client.get(
        f"{API}/admin/audit-logs", headers=auth(admin), params={"from": (utcnow() + timedelta(days=1)).isoformat()}
    )

    assert {log["entity_id"] for log in by_actor.json()["logs"]} == {1, 3}
    assert {log["entity_id"] for log in by_action.json()["logs"]} == {1, 2}
    assert future.json()["logs"] == []


# ==================== ANNOUNCEMENTS ====================

def test_create_announcement(client, auth, db_session, admin):
    response = client.post(
        f"{API}/admin/announcements",
        headers=auth(admin),
        json={"title": "Maintenance", "message": "Short downtime tonight", "audience": ["broker", "owner", "broker"]},
    )

    assert response.status_code == 201
    announcement = db_session.get(Announcement, response.json()["announcementId"])
    assert announcement.audience == ["broker", "owner"]
    assert announcement.created_by == admin.id


def test_announcement_rejects_unknown_audience(client, auth, admin):
    response = client.post(
        f"{API}/admin/announcements",
        headers=auth(admin),
        json={"title": "Hello", "message": "Hello there", "audience": ["everyone"]},
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Unknown audience tag(s): everyone"


def test_only_admins_announce(client, auth, broker):
    response = client.post(
        f"{API}/admin/announcements",
        headers=auth(broker),
        json={"title": "Hello", "message": "Hello there", "audience": ["all"]},
    )
    assert response.status_code == 403


# ==================== SEED ====================

def test_seed_admin_creates_then_refreshes(db_session):
    created = seed_admin(db_session, "Root@Example.com", "FirstPassword1")
    assert created.role == UserRole.ADMIN
    assert created.email == "root@example.com"

    created.status = UserStatus.REJECTED
    db_session.commit()

    refreshed = seed_admin(db_session, "root@example.com", "SecondPassword2", name="Ops")
    assert refreshed.id == created.id
    assert refreshed.status == UserStatus.ACTIVE
    assert refreshed.name == "Ops"


def test_seed_admin_refuses_other_roles(db_session, make_user):
    make_user(UserRole.OWNER, email="taken@example.com")
    with pytest.raises(ValueError):
        seed_admin(db_session, "taken@example.com", "Password123")
