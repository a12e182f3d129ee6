# hapibara/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class ActivityType(str, Enum):
    RECIPE_COOKED = "recipe_cooked"
    PRODUCT_BOUGHT = "product_bought"
    EVENT_ATTENDED = "event_attended"
    FRIEND_REFERRED = "friend_referred"


class Timeframe(str, Enum):
    ALL = "all"
    WEEK = "week"
    MONTH = "month"


class ApiModel(BaseModel):
    """Base for everything on the wire: camelCase JSON, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RequestModel(ApiModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class ApiResponse(ApiModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: T


# =====================================================
# CART
# =====================================================
class CartItemIn(RequestModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0, description="Product id")
    quantity: int = Field(1, gt=0, le=999, description="Quantity to add")


class CartItemUpdate(RequestModel):
    """Schema for changing a cart line. quantity == 0 removes the line."""

    cart_item_id: int = Field(..., gt=0)
    quantity: int = Field(..., ge=0, le=999)


class CartProductOut(ApiModel):
    id: int
    name: str
    slug: str
    image: Optional[str] = None
    category: str
    brand: Optional[str] = None
    price: Decimal
    original_price: Optional[Decimal] = None
    inventory: int


class CartLineOut(ApiModel):
    id: int
    quantity: int
    price: Decimal
    created_at: datetime
    product: CartProductOut


class CartSummaryOut(ApiModel):
    subtotal: Decimal
    total_items: int
    item_count: int


class CartOut(ApiModel):
    items: List[CartLineOut]
    summary: CartSummaryOut


class CartLineChanged(ApiModel):
    cart_item_id: int
    quantity: int
    removed: bool = False


class CartCleared(ApiModel):
    removed: int


# =====================================================
# ORDERS
# =====================================================
class ShippingAddress(RequestModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)


class OrderCreate(RequestModel):
    """Schema for placing an order from the current cart."""

    # Optional, bo brak adresu to MissingShippingAddress z serwisu, nie blad schematu
    shipping_address: Optional[ShippingAddress] = None
    payment_method: str = Field("stripe", min_length=1, max_length=100)
    notes: Optional[str] = Field(None, max_length=2000)


class OrderPlacedOut(ApiModel):
    order_id: int
    order_number: str
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal
    status: OrderStatus


class OrderItemOut(ApiModel):
    id: int
    product_id: Optional[int] = None
    product_name: str
    product_slug: Optional[str] = None
    quantity: int
    price: Decimal


class OrderOut(ApiModel):
    id: int
    order_number: str
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: Optional[str] = None
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal
    shipping_address: dict
    notes: Optional[str] = None
    tracking_number: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemOut]
    item_count: int


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_more: bool


class OrderListOut(ApiModel):
    orders: List[OrderOut]
    pagination: Pagination


# =====================================================
# IMPACT
# =====================================================
class ActivityIn(RequestModel):
    """Schema for logging a kindness activity."""

    activity_type: ActivityType
    related_id: Optional[int] = Field(None, gt=0)
    description: Optional[str] = Field(None, max_length=1000)
    water_saved: float = Field(0, ge=0)
    co2_reduced: float = Field(0, ge=0)
    animals_spared: float = Field(0, ge=0)


class ActivityOut(ApiModel):
    id: int
    activity_type: ActivityType
    points: int
    water_saved: float
    co2_reduced: float
    animals_spared: float
    related_id: Optional[int] = None
    description: Optional[str] = None
    created_at: datetime


class ImpactTotals(ApiModel):
    water_saved: float
    co2_reduced: float
    animals_spared: float


class ImpactStats(ApiModel):
    total_activities: int
    total_points: int
    kindness_score: int
    impact: ImpactTotals


class ActivityBreakdown(ApiModel):
    activity_type: ActivityType
    count: int
    total_points: int
    total_water_saved: float
    total_co2_reduced: float
    total_animals_spared: float


class ImpactOut(ApiModel):
    activities: List[ActivityOut]
    stats: ImpactStats
    breakdown: List[ActivityBreakdown]
    pagination: Pagination


# =====================================================
# USERS
# =====================================================
class UserCreate(RequestModel):
    """Schema for registering a user."""

    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    name: str = Field(..., min_length=1, max_length=255)


class UserRead(ApiModel):
    id: int
    email: str
    name: str
    kindness_score: int
