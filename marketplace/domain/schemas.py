# marketplace/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Literal, Optional
from decimal import Decimal
from datetime import datetime


Role = Literal["Buyer", "Seller"]
ProductStatus = Literal["available", "sold", "reserved", "no-status"]


def _not_blank(value: str | None) -> str | None:
    if value is None:
        return value
    if not value.strip():
        raise ValueError("must not be empty")
    return value.strip()


class UserCreate(BaseModel):
    """Schema for creating a user profile after signup."""

    id: str = Field(..., min_length=1, max_length=128, description="User id from the identity provider")
    role: Role
    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    address: str = ""
    phone: str = Field("", max_length=32)
    profile_image_url: Optional[str] = None
    promptpay_qr_url: Optional[str] = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, v):
        return _not_blank(v)


class UserUpdate(BaseModel):
    """Schema for a profile update. Role is not part of it."""

    username: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    address: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=32)
    profile_image_url: Optional[str] = None
    promptpay_qr_url: Optional[str] = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, v):
        return _not_blank(v)


class UserRead(BaseModel):
    """Schema for a user (response)."""

    id: str
    role: Role
    username: str
    email: str
    address: str
    phone: str
    profile_image_url: Optional[str] = None
    promptpay_qr_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    """Schema for posting a new listing."""

    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    detail: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    status: ProductStatus = "available"

    @field_validator("name", "detail")
    @classmethod
    def strip_text(cls, v):
        return _not_blank(v)


class ProductUpdate(BaseModel):
    """Schema for editing a listing. Only the given fields change."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    detail: Optional[str] = None
    image_url: Optional[str] = None
    status: Optional[ProductStatus] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return _not_blank(v)


class ProductOut(BaseModel):
    """Schema for a listing (response)."""

    id: str
    name: str
    price: Decimal
    detail: str
    image_url: Optional[str] = None
    seller_id: str
    seller_name: str
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CatalogPage(BaseModel):
    """One page of the buyer catalog."""

    items: List[ProductOut]
    next_cursor: Optional[str] = None


class CartItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: str = Field(..., min_length=1)


class CartItemOut(BaseModel):
    """Schema for a cart entry (response)."""

    product_id: str
    name: str
    price: Decimal
    detail: str
    image_url: Optional[str] = None
    seller_id: str
    seller_name: str
    status: str
    added_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    """Schema for the buyer's cart (response)."""

    buyer_id: str
    items: List[CartItemOut]
    total: Decimal


class CheckoutSummary(BaseModel):
    """What the buyer sees before paying."""

    product: ProductOut
    shop_name: str
    promptpay_qr_url: Optional[str] = None
    buyer_name: str
    buyer_address: str
    buyer_phone: str


class OrderCheck(BaseModel):
    product_id: str
    ordered: bool


class OrderOut(BaseModel):
    """Schema for an order (response)."""

    id: str
    product_id: str
    product_name: str
    product_price: Decimal
    product_image_url: Optional[str] = None
    buyer_id: str
    buyer_name: str
    buyer_address: str
    buyer_phone: str
    seller_id: str
    shop_name: str
    payment_slip_url: str
    tracking_number: Optional[str] = None
    status: str
    order_date: datetime
    last_updated: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TrackingIn(BaseModel):
    """Schema for entering a tracking number."""

    tracking_number: str = Field(..., max_length=64)


class TrackingOut(BaseModel):
    order: OrderOut
    notifications_updated: int


class NotificationOut(BaseModel):
    """Schema for a notification (response)."""

    id: str
    type: str
    title: str
    message: str
    seller_id: str
    buyer_id: str
    order_id: str
    product_id: str
    is_read: bool
    tracking_number: Optional[str] = None
    tracking_status: str
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationDetail(BaseModel):
    notification: NotificationOut
    order: Optional[OrderOut] = None


class UploadOut(BaseModel):
    key: str
    url: str
