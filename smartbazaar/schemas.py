# smartbazaar/schemas.py
from decimal import Decimal
from typing import Annotated, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Decimal in Python, plain number on the wire
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

class UserProfile(BaseModel):
    email: Optional[str] = None
    first_name: str = Field(..., max_length=80)
    last_name: str = Field("", max_length=80)
    phone: Optional[str] = None
    location: Optional[str] = None
    photo_url: Optional[str] = None

class UserOut(UserProfile):
    uid: str
    role: str
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class ListingBase(BaseModel):
    crop_name: str = Field(..., min_length=1, max_length=120)
    category: Optional[str] = None
    quantity: Decimal = Field(..., gt=0, decimal_places=3)
    unit: str = Field(..., min_length=1, max_length=16)
    price_per_unit: Decimal = Field(..., gt=0, decimal_places=2)
    location: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None

class ListingCreate(ListingBase):
    pass

class ListingOut(BaseModel):
    id: str
    farmer_id: str
    crop_name: str
    category: Optional[str] = None
    quantity: Amount
    unit: str
    price_per_unit: Amount
    location: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class ListingFilter(BaseModel):
    category: Optional[str] = None
    location: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    keyword: Optional[str] = None

class OrderCreate(BaseModel):
    listing_id: str
    quantity: Decimal = Field(..., decimal_places=3)

class StatusUpdate(BaseModel):
    status: str

class OrderEventOut(BaseModel):
    status: str
    actor_id: Optional[str] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class OrderOut(BaseModel):
    id: str
    listing_id: str
    buyer_id: str
    farmer_id: str
    crop_name: str
    quantity: Amount
    unit: str
    price_per_unit: Amount
    subtotal: Amount
    delivery_charge: Amount
    commission: Amount
    farmer_earning: Amount
    total_price: Amount
    farmer_name: str = ""
    farmer_avatar_url: str = ""
    buyer_name: str = ""
    buyer_avatar_url: str = ""
    status: str
    created_at: Optional[datetime] = None
    history: List[OrderEventOut] = []
    model_config = ConfigDict(from_attributes=True)

class SalesSummary(BaseModel):
    orders: List[OrderOut]
    total_subtotal: Amount
    total_commission: Amount
    total_farmer_earning: Amount

class NotificationOut(BaseModel):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    link: str
    is_read: bool
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class NotificationList(BaseModel):
    unread_count: int
    items: List[NotificationOut]

class MarkRead(BaseModel):
    ids: List[str]
