"""
Shop records as they come back from the data store.

Field names follow the store's snake_case columns so the same models
validate PostgREST JSON and SQLAlchemy rows (``from_attributes``).
"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

TWOPLACES = Decimal("0.01")


def present_money(value: Decimal) -> float:
    """Round to cents for display; never used in arithmetic."""
    return float(Decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP))


Money = Annotated[
    Decimal,
    PlainSerializer(present_money, return_type=float, when_used="json"),
]


class Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Product(Record):
    id: str
    name: str
    description: Optional[str] = None
    price: Money = Field(..., ge=0)
    image_url: Optional[str] = None
    category: Optional[str] = None
    stock_quantity: int = Field(0, ge=0)
    is_active: bool = True
    created_at: Optional[datetime] = None


class CartProduct(Record):
    id: str
    name: str
    price: Money = Field(..., ge=0)
    image_url: Optional[str] = None


class CartRow(Record):
    """A bare ``cart_items`` row, without the product join."""

    id: str
    user_id: Optional[str] = None
    product_id: str
    quantity: int = Field(..., ge=1)


class CartLine(Record):
    id: str
    product_id: str
    quantity: int = Field(..., ge=1)
    product: CartProduct

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity


class CartSnapshot(BaseModel):
    items: List[CartLine] = Field(default_factory=list)
    item_count: int = 0
    total_price: Money = Decimal("0")
    stale: bool = False


class OrderProduct(Record):
    name: str
    image_url: Optional[str] = None


class OrderLine(Record):
    id: Optional[str] = None
    order_id: Optional[str] = None
    product_id: Optional[str] = None
    quantity: int
    # Unit price frozen at purchase time
    price: Money
    product: Optional[OrderProduct] = None

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class Order(Record):
    id: str
    order_number: str
    user_id: str
    total_amount: Money
    status: OrderStatus = OrderStatus.PENDING
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    zip_code: str
    created_at: datetime
    order_items: List[OrderLine] = Field(default_factory=list)

    @property
    def customer_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
