from datetime import datetime, timezone

import pytest
from sqlalchemy import select, update

from app.core.config import settings
from app.core.exceptions import BadRequest
from app.models.notification import Notification
from app.models.photo_job import PhotoJob, PhotoJobMessage, PhotoJobStatus
from app.models.user import UserRole, UserStatus
from app.services.photo_job_service import PhotoJobService, can_transition, sources_for

API = settings.API_V1_STR

WHEN = datetime(2026, 11, 5, 9, 30, tzinfo=timezone.utc)


def make_job(db_session, prop, requester, preferred=None, status=PhotoJobStatus.OPEN, photographer=None):
    job = PhotoJob(
        property_id=prop.id,
        requested_by=requester.id,
        preferred_photographer_id=preferred.id if preferred else None,
        photographer_id=photographer.id if photographer else None,
        status=status,
    )
    db_session.add(job)
    db_session.commit()
    db_session.refresh(job)
    return job


def job_url(job_id, action=""):
    return f"{API}/photo-jobs/{job_id}/{action}".rstrip("/")


def notified(db_session, title):
    return db_session.execute(select(Notification.user_id).where(Notification.title == title)).scalars().all()


# ==================== STATE MACHINE ====================

ALLOWED = {
    (PhotoJobStatus.OPEN, PhotoJobStatus.ASSIGNED),
    (PhotoJobStatus.OPEN, PhotoJobStatus.REJECTED),
    (PhotoJobStatus.ASSIGNED, PhotoJobStatus.SCHEDULED),
    (PhotoJobStatus.SCHEDULED, PhotoJobStatus.SCHEDULED),
    (PhotoJobStatus.SCHEDULED, PhotoJobStatus.COMPLETED),
}


@pytest.mark.parametrize("source", list(PhotoJobStatus))
@pytest.mark.parametrize("target", list(PhotoJobStatus))
def test_transition_table(source, target):
    assert can_transition(source, target) is ((source, target) in ALLOWED)


def test_sources_for_scheduled():
    assert set(sources_for(PhotoJobStatus.SCHEDULED)) == {PhotoJobStatus.ASSIGNED, PhotoJobStatus.SCHEDULED}


# ==================== CREATE / LIST ====================

def test_owner_creates_job_for_preferred_photographer(client, auth, db_session, owner, photographer, make_property):
    prop = make_property(owner=owner)

    response = client.post(
        f"{API}/properties/{prop.id}/photo-jobs",
        headers=auth(owner),
        json={"notes": "Sunset shots please", "preferredPhotographerId": photographer.id},
    )

    assert response.status_code == 201
    assert response.json()["status"] == "open"
    job = db_session.get(PhotoJob, response.json()["jobId"])
    assert job.requested_by == owner.id
    assert job.preferred_photographer_id == photographer.id
    assert notified(db_session, "Photography request") == [photographer.id]


def test_create_requires_property_party(client, auth, owner, make_user, make_property):
    prop = make_property(owner=owner)
    response = client.post(f"{API}/properties/{prop.id}/photo-jobs", headers=auth(make_user("broker")), json={})
    assert response.status_code == 403
    assert response.json()["message"] == "Forbidden: not owner/broker of this property"


def test_create_rejects_non_photographer_preference(client, auth, owner, customer, make_property):
    prop = make_property(owner=owner)
    response = client.post(
        f"{API}/properties/{prop.id}/photo-jobs",
        headers=auth(owner),
        json={"preferredPhotographerId": customer.id},
    )
    assert response.status_code == 400


def test_open_list_hides_jobs_preferred_for_others(client, auth, db_session, owner, photographer, make_user,
                                                   make_property):
    prop = make_property(owner=owner)
    other = make_user(UserRole.PHOTOGRAPHER)
    public_job = make_job(db_session, prop, owner)
    mine = make_job(db_session, prop, owner, preferred=photographer)
    make_job(db_session, prop, owner, preferred=other)

    response = client.get(f"{API}/photo-jobs/open", headers=auth(photographer))

    assert response.status_code == 200
    assert {j["id"] for j in response.json()["jobs"]} == {public_job.id, mine.id}


def test_open_list_is_for_photographers(client, auth, owner):
    assert client.get(f"{API}/photo-jobs/open", headers=auth(owner)).status_code == 403


def test_mine_lists_by_role(client, auth, db_session, owner, photographer, make_property):
    prop = make_property(owner=owner)
    assigned = make_job(db_session, prop, owner, status=PhotoJobStatus.ASSIGNED, photographer=photographer)
    make_job(db_session, prop, owner)

    as_photographer = client.get(f"{API}/photo-jobs/mine", headers=auth(photographer)).json()["jobs"]
    as_owner = client.get(f"{API}/photo-jobs/mine", headers=auth(owner)).json()["jobs"]

    assert [j["id"] for j in as_photographer] == [assigned.id]
    assert len(as_owner) == 2


# ==================== ACCEPT / REJECT ====================

def test_preferred_job_is_reserved(client, auth, db_session, owner, make_user, make_property):
    """A job preferred for one photographer cannot be taken by another."""
    prop = make_property(owner=owner)
    preferred = make_user(UserRole.PHOTOGRAPHER)
    outsider = make_user(UserRole.PHOTOGRAPHER)
    job = make_job(db_session, prop, owner, preferred=preferred)

    blocked = client.post(job_url(job.id, "accept"), headers=auth(outsider))
    assert blocked.status_code == 403
    assert blocked.json()["message"] == "Forbidden: job is preferred for another photographer"

    taken = client.post(job_url(job.id, "accept"), headers=auth(preferred))
    assert taken.status_code == 200
    assert taken.json()["photographerId"] == preferred.id

    db_session.expire_all()
    stored = db_session.get(PhotoJob, job.id)
    assert stored.status == PhotoJobStatus.ASSIGNED
    assert stored.photographer_id == preferred.id
    assert notified(db_session, "Photographer assigned") == [owner.id]


def test_second_accept_is_refused(client, auth, db_session, owner, photographer, make_user, make_property):
    prop = make_property(owner=owner)
    job = make_job(db_session, prop, owner)

    assert client.post(job_url(job.id, "accept"), headers=auth(photographer)).status_code == 200

    late = client.post(job_url(job.id, "accept"), headers=auth(make_user(UserRole.PHOTOGRAPHER)))
    assert late.status_code == 400
    assert late.json()["message"] == "Job is not open"

    db_session.expire_all()
    assert db_session.get(PhotoJob, job.id).photographer_id == photographer.id


def test_accept_losing_race(db_session, owner, photographer, make_property):
    prop = make_property(owner=owner)
    job = make_job(db_session, prop, owner)
    service = PhotoJobService(db_session)

    # A competing accept lands between our read and our update
    db_session.execute(
        update(PhotoJob)
        .where(PhotoJob.id == job.id)
        .values(status=PhotoJobStatus.ASSIGNED)
        .execution_options(synchronize_session=False)
    )

    with pytest.raises(BadRequest) as exc:
        service.accept(photographer, job.id)
    assert exc.value.message == "Job is not open"


def test_admin_assigns_photographer(client, auth, db_session, admin, owner, photographer, make_property):
    prop = make_property(owner=owner)
    job = make_job(db_session, prop, owner)

    response = client.post(job_url(job.id, "accept"), headers=auth(admin), json={"photographerId": photographer.id})

    assert response.status_code == 200
    db_session.expire_all()
    assert db_session.get(PhotoJob, job.id).photographer_id == photographer.id
    assert notified(db_session, "Job assigned") == [photographer.id]


def test_admin_cannot_assign_pending_photographer(client, auth, db_session, admin, owner, make_user, make_property):
    prop = make_property(owner=owner)
    job = make_job(db_session, prop, owner)
    pending = make_user(UserRole.PHOTOGRAPHER, UserStatus.PENDING)

    response = client.post(job_url(job.id, "accept"), headers=auth(admin), json={"photographerId": pending.id})
    assert response.status_code == 400


def test_photographer_cannot_assign_someone_else(client, auth, db_session, owner, photographer, make_user,
                                                 make_property):
    prop = make_property(owner=owner)
    job = make_job(db_session, prop, owner)
    other = make_user(UserRole.PHOTOGRAPHER)

    response = client.post(job_url(job.id, "accept"), headers=auth(photographer), json={"photographerId": other.id})
    assert response.status_code == 400


def test_reject_open_job(client, auth, db_session, owner, photographer, make_property):
    prop = make_property(owner=owner)
    job = make_job(db_session, prop, owner, preferred=photographer)

    response = client.post(job_url(job.id, "reject"), headers=auth(photographer), json={"reason": "Fully booked"})

    assert response.status_code == 200
    db_session.expire_all()
    stored = db_session.get(PhotoJob, job.id)
    assert stored.status == PhotoJobStatus.REJECTED
    assert stored.reject_reason == "Fully booked"
    assert notified(db_session, "Photography request rejected") == [owner.id]


# ==================== SCHEDULE / COMPLETE ====================

def test_full_lifecycle(client, auth, db_session, owner, photographer, make_property):
    prop = make_property(owner=owner)
    job = make_job(db_session, prop, owner)
    headers = auth(photographer)

    early = client.post(job_url(job.id, "complete"), headers=headers)
    assert early.status_code == 403  # not assigned to anyone yet

    assert client.post(job_url(job.id, "accept"), headers=headers).status_code == 200

    premature = client.post(job_url(job.id, "complete"), headers=headers)
    assert premature.status_code == 400
    assert premature.json()["message"] == "Job must be scheduled to complete"

    body = {"scheduledAt": WHEN.isoformat()}
    assert client.post(job_url(job.id, "schedule"), headers=headers, json=body).status_code == 200
    # Re-scheduling keeps the job scheduled
    assert client.post(job_url(job.id, "schedule"), headers=headers, json=body).status_code == 200
    assert client.post(job_url(job.id, "complete"), headers=headers).status_code == 200

    db_session.expire_all()
    assert db_session.get(PhotoJob, job.id).status == PhotoJobStatus.COMPLETED

    after = client.post(job_url(job.id, "schedule"), headers=headers, json=body)
    assert after.status_code == 400
    assert after.json()["message"] == "Job must be assigned first"


def test_admin_cannot_skip_state_guard(client, auth, db_session, admin, owner, make_property):
    prop = make_property(owner=owner)
    job = make_job(db_session, prop, owner)
    response = client.post(job_url(job.id, "complete"), headers=auth(admin))
    assert response.status_code == 400


def test_requester_cannot_schedule(client, auth, db_session, owner, photographer, make_property):
    prop = make_property(owner=owner)
    job = make_job(db_session, prop, owner, status=PhotoJobStatus.ASSIGNED, photographer=photographer)
    response = client.post(job_url(job.id, "schedule"), headers=auth(owner), json={"scheduledAt": WHEN.isoformat()})
    assert response.status_code == 403


def test_unknown_job(client, auth, photographer):
    assert client.post(job_url(4040, "accept"), headers=auth(photographer)).status_code == 404


# ==================== MESSAGES ====================

def test_message_thread(client, auth, db_session, owner, photographer, make_user, make_property):
    prop = make_property(owner=owner)
    job = make_job(db_session, prop, owner, status=PhotoJobStatus.ASSIGNED, photographer=photographer)

    from_photographer = client.post(
        job_url(job.id, "messages"), headers=auth(photographer), json={"message": "Arriving at 9"}
    )
    from_owner = client.post(job_url(job.id, "messages"), headers=auth(owner), json={"message": "Gate code 1234"})

    assert from_photographer.status_code == 200
    assert from_photographer.json()["sent"] is True
    assert from_owner.status_code == 200

    assert notified(db_session, "New job message") == [owner.id, photographer.id]

    thread = client.get(job_url(job.id, "messages"), headers=auth(owner)).json()["messages"]
    assert [m["message"] for m in thread] == ["Arriving at 9", "Gate code 1234"]

    outsider = client.get(job_url(job.id, "messages"), headers=auth(make_user(UserRole.PHOTOGRAPHER)))
    assert outsider.status_code == 403


def test_message_on_open_job_notifies_nobody(client, auth, db_session, owner, make_property):
    prop = make_property(owner=owner)
    job = make_job(db_session, prop, owner)

    response = client.post(job_url(job.id, "messages"), headers=auth(owner), json={"message": "Any takers?"})

    assert response.status_code == 200
    assert db_session.execute(select(PhotoJobMessage)).scalar_one().sender_user_id == owner.id
    assert notified(db_session, "New job message") == []
