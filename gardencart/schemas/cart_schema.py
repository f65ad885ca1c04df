from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ProductRef(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    id: str = Field(alias="_id", validation_alias=AliasChoices("_id", "id"))
    name: str = ""
    price: Decimal = Decimal("0")
    stock: int = 0
    images: List[str] = []

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        return str(v) if v is not None else v


class CartLineItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    id: str = Field(alias="_id", validation_alias=AliasChoices("_id", "id"))
    product: ProductRef
    quantity: int = Field(1, ge=1)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        return str(v) if v is not None else v

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity


# The backend answers cart calls in one of two shapes. Each known shape gets
# its own variant; anything else is Unrecognized and makes the caller refetch.


@dataclass(frozen=True)
class NestedCartResponse:
    """`{"cart": {"items": [...]}}`"""

    items: List[CartLineItem] = field(default_factory=list)


@dataclass(frozen=True)
class FlatCartResponse:
    """`{"items": [...]}`"""

    items: List[CartLineItem] = field(default_factory=list)


@dataclass(frozen=True)
class UnrecognizedCartResponse:
    payload: Any = None


CartResponse = Union[NestedCartResponse, FlatCartResponse, UnrecognizedCartResponse]


def _parse_items(raw) -> List[CartLineItem]:
    return [CartLineItem.model_validate(it) for it in (raw or [])]


def classify_cart_response(payload: Any) -> CartResponse:
    if isinstance(payload, dict):
        cart = payload.get("cart")
        if isinstance(cart, dict):
            return NestedCartResponse(items=_parse_items(cart.get("items")))
        if isinstance(payload.get("items"), list):
            return FlatCartResponse(items=_parse_items(payload["items"]))
    return UnrecognizedCartResponse(payload=payload)


def cart_to_wire(items: List[Dict]) -> Dict:
    """Server-side helper: the nested shape plus its derived totals."""
    total_items = sum(it["quantity"] for it in items)
    total_amount = sum(Decimal(str(it["product"]["price"])) * it["quantity"] for it in items)
    return {"items": items, "totalItems": total_items, "totalAmount": total_amount}
