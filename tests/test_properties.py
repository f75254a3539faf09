from sqlalchemy import select

from app.core.config import settings
from app.models.analytics import Inquiry
from app.models.notification import Notification
from app.models.property import ApprovalStatus, Property

API = settings.API_V1_STR

LISTING = {
    "title": "Two bedroom flat",
    "description": "Quiet street, borehole water",
    "price": 850,
    "type": "apartment",
    "location": "Munuki Block B",
    "area": "Juba",
}


def test_owner_lists_property_pending_approval(client, auth, db_session, owner, admin):
    response = client.post(f"{API}/properties", headers=auth(owner), json=LISTING)

    assert response.status_code == 201
    assert response.json()["approval_status"] == "pending"

    prop = db_session.get(Property, response.json()["propertyId"])
    assert prop.owner_id == owner.id
    assert prop.broker_id is None

    notes = db_session.execute(select(Notification.user_id, Notification.title)).all()
    assert [tuple(n) for n in notes] == [(admin.id, "Listing pending approval")]


def test_broker_names_the_owner(client, auth, db_session, owner, broker):
    response = client.post(f"{API}/properties", headers=auth(broker), json={**LISTING, "ownerId": owner.id})

    prop = db_session.get(Property, response.json()["propertyId"])
    assert (prop.owner_id, prop.broker_id) == (owner.id, broker.id)


def test_admin_must_name_a_party(client, auth, admin, customer):
    assert client.post(f"{API}/properties", headers=auth(admin), json=LISTING).status_code == 400

    wrong_role = client.post(f"{API}/properties", headers=auth(admin), json={**LISTING, "ownerId": customer.id})
    assert wrong_role.status_code == 400


def test_customers_cannot_list(client, auth, customer):
    assert client.post(f"{API}/properties", headers=auth(customer), json=LISTING).status_code == 403


def test_public_list_shows_only_approved(client, owner, make_property):
    approved = make_property(owner=owner, title="Approved house")
    make_property(owner=owner, approval_status=ApprovalStatus.PENDING, title="Pending house")
    make_property(owner=owner, approval_status=ApprovalStatus.REJECTED, title="Rejected house")

    response = client.get(f"{API}/properties")

    assert response.status_code == 200
    assert [p["id"] for p in response.json()["properties"]] == [approved.id]


def test_public_list_filters(client, db_session, owner, make_property):
    flat = make_property(owner=owner)
    house = make_property(owner=owner)
    house.type = "house"
    house.area = "Wau"
    db_session.commit()

    flats = client.get(f"{API}/properties", params={"type": "apartment"}).json()["properties"]
    in_wau = client.get(f"{API}/properties", params={"area": "Wau"}).json()["properties"]

    assert [p["id"] for p in flats] == [flat.id]
    assert [p["id"] for p in in_wau] == [house.id]


def test_list_limit_is_bounded(client):
    assert client.get(f"{API}/properties", params={"limit": 0}).status_code == 400


def test_soft_deleted_property_disappears(client, auth, db_session, owner, broker, make_property):
    prop = make_property(owner=owner, broker=broker)

    response = client.delete(f"{API}/properties/{prop.id}", headers=auth(broker))
    assert response.status_code == 200

    db_session.expire_all()
    assert db_session.get(Property, prop.id).deleted_at is not None
    assert client.get(f"{API}/properties/{prop.id}").status_code == 404
    assert client.get(f"{API}/properties").json()["properties"] == []


def test_delete_by_stranger(client, auth, owner, make_user, make_property):
    prop = make_property(owner=owner)
    assert client.delete(f"{API}/properties/{prop.id}", headers=auth(make_user("owner"))).status_code == 403


def test_guest_inquiry_goes_to_broker(client, db_session, owner, broker, make_property):
    prop = make_property(owner=owner, broker=broker)

    response = client.post(
        f"{API}/properties/{prop.id}/inquiries",
        json={"name": "Deng", "email": "deng@example.com", "message": "Still available?"},
    )

    assert response.status_code == 201
    inquiry = db_session.execute(select(Inquiry)).scalar_one()
    assert inquiry.recipient_user_id == broker.id
    assert inquiry.requester_user_id is None

    notes = db_session.execute(select(Notification.user_id).where(Notification.title == "New inquiry")).scalars().all()
    assert notes == [broker.id]


def test_owner_cannot_name_a_non_broker(client, auth, db_session, owner, customer):
    as_customer = client.post(f"{API}/properties", headers=auth(owner), json={**LISTING, "brokerId": customer.id})
    dangling = client.post(f"{API}/properties", headers=auth(owner), json={**LISTING, "brokerId": 424242})

    assert as_customer.status_code == 400
    assert as_customer.json()["message"] == "brokerId must reference a user with role broker"
    assert dangling.status_code == 400
    assert db_session.execute(select(Property)).scalars().all() == []


def test_broker_cannot_name_a_non_owner(client, auth, broker, photographer):
    response = client.post(f"{API}/properties", headers=auth(broker), json={**LISTING, "ownerId": photographer.id})
    assert response.status_code == 400
    assert response.json()["message"] == "ownerId must reference a user with role owner"


def test_owner_names_a_real_broker(client, auth, db_session, owner, broker):
    response = client.post(f"{API}/properties", headers=auth(owner), json={**LISTING, "brokerId": broker.id})

    assert response.status_code == 201
    prop = db_session.get(Property, response.json()["propertyId"])
    assert (prop.owner_id, prop.broker_id) == (owner.id, broker.id)


def test_owner_cannot_reassign_the_owner_slot(client, auth, db_session, owner, make_user):
    other_owner = make_user("owner")
    response = client.post(f"{API}/properties", headers=auth(owner), json={**LISTING, "ownerId": other_owner.id})

    prop = db_session.get(Property, response.json()["propertyId"])
    assert prop.owner_id == owner.id
