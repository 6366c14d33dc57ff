from sqlalchemy import Column, String

from marketplace.data.database import Base

ROLE_BUYER = "Buyer"
ROLE_SELLER = "Seller"


class UserModel(Base):
    __tablename__ = "users"

    #id comes from the identity provider
    id = Column(String(128), primary_key=True)
    role = Column(String(16), nullable=False)

    username = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    address = Column(String, nullable=False, default="")
    phone = Column(String(32), nullable=False, default="")

    profile_image_url = Column(String, nullable=True)
    promptpay_qr_url = Column(String, nullable=True)
