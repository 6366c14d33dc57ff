# marketplace/data/seed.py
from decimal import Decimal

from marketplace.data.database import SessionLocal
from marketplace.data.models import UserModel, ProductModel
from marketplace.data.models.user import ROLE_BUYER, ROLE_SELLER


def seed(session_factory=SessionLocal):
    db = session_factory()
    try:
        # not forcing: only seed if empty
        if db.query(UserModel).first():
            return False

        seller = UserModel(
            id="demo-seller",
            role=ROLE_SELLER,
            username="Demo Shop",
            email="seller@example.com",
            address="1 Market Road",
            phone="0800000001",
        )
        buyer = UserModel(
            id="demo-buyer",
            role=ROLE_BUYER,
            username="Demo Buyer",
            email="buyer@example.com",
            address="2 Buyer Street",
            phone="0800000002",
        )
        db.add_all([seller, buyer])
        db.flush()

        for name, price in (("Denim jacket", "450.00"), ("Desk lamp", "180.00"), ("Paperback set", "250.00")):
            db.add(
                ProductModel(
                    seller_id=seller.id,
                    seller_name=seller.username,
                    name=name,
                    price=Decimal(price),
                    detail=f"Second-hand {name.lower()}, good condition",
                )
            )
        db.commit()
        return True
    finally:
        db.close()


if __name__ == "__main__":
    from marketplace.data.database import Base, engine

    Base.metadata.create_all(bind=engine)
    seed()
