import io

from PIL import Image
from sqlalchemy import select

from app.core.config import settings
from app.models.audit_log import AuditLog
from app.models.media import Media, MediaKind
from app.models.notification import Notification
from app.models.property import ApprovalStatus
from app.services.storage import IncomingFile, LocalStorage

API = settings.API_V1_STR


def png_bytes(width=1200, height=800):
    buf = io.BytesIO()
    Image.new("RGB", (width, height), (30, 120, 200)).save(buf, format="PNG")
    return buf.getvalue()


def upload(client, headers, property_id, files):
    return client.post(f"{API}/properties/{property_id}/media", headers=headers, files=files)


def add_media(db_session, prop, uploader, status=ApprovalStatus.PENDING, deleted=False):
    from app.db.base import utcnow

    media = Media(
        property_id=prop.id,
        uploaded_by=uploader.id,
        kind=MediaKind.PHOTO,
        url="/uploads/x.jpg",
        mime_type="image/jpeg",
        size_bytes=10,
        approval_status=status,
        deleted_at=utcnow() if deleted else None,
    )
    db_session.add(media)
    db_session.commit()
    db_session.refresh(media)
    return media


def test_upload_skips_unsupported_files(client, auth, db_session, owner, admin, make_property, upload_dir):
    prop = make_property(owner=owner)

    response = upload(client, auth(owner), prop.id, [
        ("files", ("front.png", png_bytes(), "image/png")),
        ("files", ("tour.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4")),
        ("files", ("notes.pdf", b"%PDF-1.4", "application/pdf")),
    ])

    assert response.status_code == 201
    body = response.json()
    assert body["ok"] is True
    assert body["approval_status"] == "pending"
    assert [m["kind"] for m in body["uploaded"]] == ["photo", "video"]

    rows = db_session.execute(select(Media).where(Media.property_id == prop.id)).scalars().all()
    assert len(rows) == 2
    assert all(m.approval_status == ApprovalStatus.PENDING for m in rows)

    photo = body["uploaded"][0]
    assert photo["thumbUrl"] is not None
    assert body["uploaded"][1]["thumbUrl"] is None

    # Thumbnail is shrunk to the configured width
    thumb_file = upload_dir / photo["thumbUrl"].rsplit("/", 1)[-1]
    with Image.open(thumb_file) as thumb:
        assert thumb.width == 600
        assert thumb.format == "JPEG"

    audits = db_session.execute(select(AuditLog).where(AuditLog.action == "MEDIA_UPLOADED")).scalars().all()
    assert len(audits) == 2

    admin_notes = db_session.execute(select(Notification).where(Notification.user_id == admin.id)).scalars().all()
    assert [n.title for n in admin_notes] == ["Media pending approval"]


def test_upload_by_any_photographer_is_allowed(client, auth, owner, photographer, make_property):
    prop = make_property(owner=owner)
    response = upload(client, auth(photographer), prop.id, [("files", ("a.png", png_bytes(200, 100), "image/png"))])
    assert response.status_code == 201


def test_upload_by_unrelated_owner_is_forbidden(client, auth, owner, make_user, make_property):
    prop = make_property(owner=owner)
    stranger = make_user("owner")
    response = upload(client, auth(stranger), prop.id, [("files", ("a.png", png_bytes(), "image/png"))])
    assert response.status_code == 403
    assert response.json()["ok"] is False


def test_upload_checks_existence_before_permission(client, auth, customer):
    response = upload(client, auth(customer), 4242, [("files", ("a.png", png_bytes(), "image/png"))])
    assert response.status_code == 404


def test_upload_without_files_is_rejected(client, auth, owner, make_property):
    prop = make_property(owner=owner)
    response = client.post(f"{API}/properties/{prop.id}/media", headers=auth(owner))
    assert response.status_code == 400
    assert response.json()["message"] == "No files uploaded"


def test_upload_to_deleted_property_is_not_found(client, auth, db_session, owner, make_property):
    from app.db.base import utcnow

    prop = make_property(owner=owner)
    prop.deleted_at = utcnow()
    db_session.commit()

    response = upload(client, auth(owner), prop.id, [("files", ("a.png", png_bytes(), "image/png"))])
    assert response.status_code == 404


def test_public_listing_only_shows_approved_live_media(client, db_session, owner, make_property):
    prop = make_property(owner=owner)
    visible = add_media(db_session, prop, owner, ApprovalStatus.APPROVED)
    add_media(db_session, prop, owner, ApprovalStatus.PENDING)
    add_media(db_session, prop, owner, ApprovalStatus.REJECTED)
    add_media(db_session, prop, owner, ApprovalStatus.APPROVED, deleted=True)

    response = client.get(f"{API}/properties/{prop.id}/media")

    assert response.status_code == 200
    assert [m["id"] for m in response.json()["media"]] == [visible.id]


def test_approve_twice_emits_events_once(client, auth, db_session, owner, broker, photographer, admin, make_property):
    prop = make_property(owner=owner, broker=broker)
    media = add_media(db_session, prop, photographer)

    first = client.patch(f"{API}/admin/media/{media.id}/approve", headers=auth(admin))
    second = client.patch(f"{API}/admin/media/{media.id}/approve", headers=auth(admin))

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json() == {"ok": True, "mediaId": media.id, "approval_status": "approved"}

    audits = db_session.execute(select(AuditLog).where(AuditLog.action == "MEDIA_APPROVED")).scalars().all()
    assert len(audits) == 1

    notified = db_session.execute(
        select(Notification.user_id).where(Notification.title == "Media approved")
    ).scalars().all()
    assert sorted(notified) == sorted([photographer.id, owner.id, broker.id])


def test_reject_always_reapplies(client, auth, db_session, owner, admin, make_property):
    prop = make_property(owner=owner)
    media = add_media(db_session, prop, owner, ApprovalStatus.REJECTED)

    response = client.patch(
        f"{API}/admin/media/{media.id}/reject", headers=auth(admin), json={"reason": "Blurry photo"}
    )

    assert response.status_code == 200
    assert response.json()["approval_status"] == "rejected"
    audit = db_session.execute(select(AuditLog).where(AuditLog.action == "MEDIA_REJECTED")).scalar_one()
    assert audit.meta["reason"] == "Blurry photo"

    # Uploader and owner are the same person: one notification
    notes = db_session.execute(select(Notification).where(Notification.title == "Media rejected")).scalars().all()
    assert [n.user_id for n in notes] == [owner.id]


def test_non_admin_cannot_moderate_media(client, auth, db_session, owner, make_property):
    prop = make_property(owner=owner)
    media = add_media(db_session, prop, owner)
    response = client.patch(f"{API}/admin/media/{media.id}/approve", headers=auth(owner))
    assert response.status_code == 403


def test_media_of_deleted_property_cannot_be_moderated(client, auth, db_session, owner, admin, make_property):
    from app.db.base import utcnow

    prop = make_property(owner=owner)
    media = add_media(db_session, prop, owner)
    prop.deleted_at = utcnow()
    db_session.commit()

    response = client.patch(f"{API}/admin/media/{media.id}/approve", headers=auth(admin))

    assert response.status_code == 404
    assert response.json()["message"] == "Property not found"
    db_session.expire_all()
    assert db_session.get(Media, media.id).approval_status == ApprovalStatus.PENDING


def test_soft_delete_keeps_approval_status(client, auth, db_session, owner, make_property):
    prop = make_property(owner=owner)
    media = add_media(db_session, prop, owner, ApprovalStatus.APPROVED)

    response = client.delete(f"{API}/media/{media.id}", headers=auth(owner))
    assert response.status_code == 200

    db_session.expire_all()
    stored = db_session.get(Media, media.id)
    assert stored.deleted_at is not None
    assert stored.approval_status == ApprovalStatus.APPROVED

    # Deleted media is gone for every later operation
    again = client.delete(f"{API}/media/{media.id}", headers=auth(owner))
    assert again.status_code == 404


def test_photographer_cannot_delete_media(client, auth, db_session, owner, photographer, make_property):
    prop = make_property(owner=owner)
    media = add_media(db_session, prop, photographer)
    response = client.delete(f"{API}/media/{media.id}", headers=auth(photographer))
    assert response.status_code == 403


def test_admin_media_list_filters(client, auth, db_session, owner, admin, make_property):
    prop = make_property(owner=owner)
    pending = add_media(db_session, prop, owner, ApprovalStatus.PENDING)
    add_media(db_session, prop, owner, ApprovalStatus.APPROVED)
    add_media(db_session, prop, owner, ApprovalStatus.PENDING, deleted=True)

    response = client.get(f"{API}/admin/media", headers=auth(admin), params={"status": "pending"})

    assert response.status_code == 200
    assert [m["id"] for m in response.json()["media"]] == [pending.id]


def test_storage_survives_unreadable_image(tmp_path):
    storage = LocalStorage(root=str(tmp_path), url_prefix="/uploads")
    stored = storage.save(IncomingFile("broken.jpg", "image/jpeg", b"not an image"), make_thumbnail=True)
    assert stored.url.startswith("/uploads/")
    assert stored.thumb_url is None
