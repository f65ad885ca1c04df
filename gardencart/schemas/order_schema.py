import enum
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

REQUIRED_SHIPPING_FIELDS = ("full_name", "phone", "address_line1", "city", "district")


class PaymentMethod(str, enum.Enum):
    CASH_ON_DELIVERY = "cash-on-delivery"
    BKASH = "bkash"
    NAGAD = "nagad"
    CARD = "card"


class ShippingAddress(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    full_name: str = ""
    phone: str = ""
    email: str = ""
    address_line1: str = Field("", alias="addressLine1")
    address_line2: str = Field("", alias="addressLine2")
    city: str = ""
    district: str = ""
    postal_code: str = ""
    country: str = "Bangladesh"

    def missing_fields(self) -> List[str]:
        return [f for f in REQUIRED_SHIPPING_FIELDS if not getattr(self, f).strip()]

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class OrderLineOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)
    product: str
    name: Optional[str] = None
    quantity: int
    price: Decimal

    @field_validator("product", mode="before")
    @classmethod
    def _product_as_str(cls, v):
        return str(v) if v is not None else v

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Order(BaseModel):
    """Read-only view of a created order; prices are the order-time snapshot."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore"
    )
    id: str = Field(alias="_id", validation_alias=AliasChoices("_id", "id"))
    order_number: str
    items: Tuple[OrderLineOut, ...] = ()
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    customer_notes: str = ""
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    discount: Decimal = Decimal("0")
    total_amount: Decimal
    status: str = "pending"
    created_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        return str(v) if v is not None else v

    @field_validator("customer_notes", mode="before")
    @classmethod
    def _notes(cls, v):
        return v or ""
