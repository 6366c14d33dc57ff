from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from conftest import TestingSessionLocal, make_product, slip_upload
from marketplace.data.models import NotificationModel, OrderModel
from marketplace.services.notification_service import NotificationService


@pytest.fixture
def order_id(client, db, seller, buyer):
    make_product(db, seller, product_id="P1")
    resp = client.post(
        "/orders/",
        params={"user_id": buyer.id},
        data={"product_id": "P1"},
        files=slip_upload(),
    )
    assert resp.status_code == 201
    return resp.json()["id"]


def add_notification(db, order_id, seller, buyer, **fields):
    n = NotificationModel(
        type=fields.pop("type", "order"),
        title="New Order Received",
        message="copy",
        seller_id=seller.id,
        buyer_id=buyer.id,
        order_id=order_id,
        product_id="P1",
        is_read=fields.pop("is_read", True),
        timestamp=datetime.now(timezone.utc),
    )
    db.add(n)
    db.commit()
    return n


def test_tracking_updates_order_and_every_notification(client, db, seller, buyer, order_id):
    add_notification(db, order_id, seller, buyer)

    resp = client.post(
        f"/orders/{order_id}/tracking",
        params={"user_id": seller.id},
        json={"tracking_number": "TH1234567890"},
    )

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["notifications_updated"] == 2
    assert body["order"]["tracking_number"] == "TH1234567890"
    assert body["order"]["status"] == "Shipped"

    db.expire_all()
    order = db.get(OrderModel, order_id)
    assert order.tracking_number == "TH1234567890"
    assert order.status == "Shipped"
    assert order.last_updated is not None

    notifications = db.query(NotificationModel).filter_by(order_id=order_id).all()
    assert len(notifications) == 2
    for n in notifications:
        assert n.tracking_number == "TH1234567890"
        assert n.type == "delivery"
        assert n.is_read is False
        assert n.title == "Your package has been shipped."
        assert n.message == "Tracking number: TH1234567890"


def test_tracking_number_is_trimmed(client, db, seller, order_id):
    resp = client.post(
        f"/orders/{order_id}/tracking",
        params={"user_id": seller.id},
        json={"tracking_number": "  EF123TH  "},
    )

    assert resp.status_code == 200
    assert resp.json()["order"]["tracking_number"] == "EF123TH"


def test_blank_tracking_number_rejected(client, db, seller, order_id):
    resp = client.post(
        f"/orders/{order_id}/tracking",
        params={"user_id": seller.id},
        json={"tracking_number": "   "},
    )

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Please enter a tracking number before saving."
    db.expire_all()
    assert db.get(OrderModel, order_id).status == "Pending"


def test_only_the_seller_enters_tracking(client, db, buyer, order_id):
    resp = client.post(
        f"/orders/{order_id}/tracking",
        params={"user_id": buyer.id},
        json={"tracking_number": "TH1"},
    )
    assert resp.status_code == 403

    missing = client.post(
        "/orders/nope/tracking",
        params={"user_id": buyer.id},
        json={"tracking_number": "TH1"},
    )
    assert missing.status_code == 404


def test_tracking_without_notifications_still_succeeds(client, db, seller, order_id):
    db.query(NotificationModel).delete()
    db.commit()

    resp = client.post(
        f"/orders/{order_id}/tracking",
        params={"user_id": seller.id},
        json={"tracking_number": "TH999"},
    )

    assert resp.status_code == 200
    assert resp.json()["notifications_updated"] == 0
    db.expire_all()
    assert db.get(OrderModel, order_id).status == "Shipped"


def test_tracking_can_be_corrected(client, db, seller, order_id):
    for number in ("TH1", "TH2"):
        client.post(
            f"/orders/{order_id}/tracking",
            params={"user_id": seller.id},
            json={"tracking_number": number},
        )

    db.expire_all()
    assert db.get(OrderModel, order_id).tracking_number == "TH2"
    assert {n.tracking_number for n in db.query(NotificationModel).all()} == {"TH2"}


def test_tracking_pushes_to_buyer(client, db, seller, buyer, order_id, monkeypatch):
    pushed = []
    monkeypatch.setattr(
        NotificationService,
        "send_push",
        staticmethod(lambda notification, recipient_id: pushed.append((notification.title, recipient_id))),
    )

    client.post(
        f"/orders/{order_id}/tracking",
        params={"user_id": seller.id},
        json={"tracking_number": "TH1"},
    )

    assert pushed == [("Your package has been shipped.", buyer.id)]


def test_failed_commit_leaves_order_and_notifications_untouched(client, db, seller, order_id, monkeypatch):
    real_commit = Session.commit

    def failing_commit(self):
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(Session, "commit", failing_commit)
    resp = client.post(
        f"/orders/{order_id}/tracking",
        params={"user_id": seller.id},
        json={"tracking_number": "TH1"},
    )
    monkeypatch.setattr(Session, "commit", real_commit)

    assert resp.status_code == 500
    assert resp.json()["detail"].startswith("Failed to save tracking number")

    check = TestingSessionLocal()
    try:
        order = check.get(OrderModel, order_id)
        assert order.tracking_number is None
        assert order.status == "Pending"
        n = check.query(NotificationModel).one()
        assert n.type == "order"
        assert n.tracking_number is None
    finally:
        check.close()


def test_push_failure_does_not_fail_the_request(client, db, seller, order_id, monkeypatch):
    def broker_down(notification, recipient_id):
        raise ConnectionError("broker unreachable")

    monkeypatch.setattr(NotificationService, "send_push", staticmethod(broker_down))

    resp = client.post(
        f"/orders/{order_id}/tracking",
        params={"user_id": seller.id},
        json={"tracking_number": "TH1"},
    )

    assert resp.status_code == 200
