from conftest import TestingSessionLocal, make_product, make_user, put_in_cart
from marketplace.data.models import CartEntryModel, ProductModel, UserModel
from marketplace.data.seed import seed
from marketplace.services.notification_service import send_push_notification_task
from marketplace.tasks.prune import prune_cart_entries_task


def test_prune_drops_entries_of_unavailable_products(db, seller, buyer, monkeypatch):
    monkeypatch.setattr("marketplace.tasks.prune.SessionLocal", TestingSessionLocal)
    other = make_user(db, "buyer2")
    on_sale = make_product(db, seller, product_id="p1")
    sold = make_product(db, seller, product_id="p2", status="sold")
    put_in_cart(db, buyer, on_sale)
    put_in_cart(db, buyer, sold)
    put_in_cart(db, other, sold)

    removed = prune_cart_entries_task.delay().get()

    assert removed == 2
    db.expire_all()
    remaining = db.query(CartEntryModel).all()
    assert [(e.buyer_id, e.product_id) for e in remaining] == [(buyer.id, "p1")]


def test_prune_with_nothing_stale(db, seller, buyer, monkeypatch):
    monkeypatch.setattr("marketplace.tasks.prune.SessionLocal", TestingSessionLocal)
    put_in_cart(db, buyer, make_product(db, seller, product_id="p1"))

    assert prune_cart_entries_task() == 0


def test_push_task_reports_delivery():
    result = send_push_notification_task.delay("n1", "seller1", "New Order Received", "x placed an order").get()

    assert result == {"notification_id": "n1", "recipient_id": "seller1", "status": "sent"}


def test_seed_only_fills_an_empty_database(db):
    assert seed(TestingSessionLocal) is True
    assert seed(TestingSessionLocal) is False

    assert db.query(UserModel).count() == 2
    assert db.query(ProductModel).filter_by(status="available").count() == 3
