from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.orm import Session

from gardencart.db import get_db
from gardencart.models.user import User
from gardencart.server.deps import current_user
from gardencart.server.order_service import OrderService, OrderServiceException
from gardencart.server.serializers import order_to_wire

router = APIRouter(prefix="/api/marketplace/orders", tags=["orders"])


class OrderItemIn(BaseModel):
    product: str = Field(..., validation_alias=AliasChoices("product", "productId"))
    quantity: int = Field(..., gt=0)
    # informational only; the server prices the order itself
    price: Optional[Decimal] = None


class CreateOrderIn(BaseModel):
    items: List[OrderItemIn]
    shippingAddress: dict
    paymentMethod: str = "cash-on-delivery"
    customerNotes: Optional[str] = None


@router.post("", summary="Create order (checkout)", status_code=201)
def create_order(
    payload: CreateOrderIn, user: User = Depends(current_user), db: Session = Depends(get_db)
):
    svc = OrderService(db)
    try:
        order = svc.create_order(
            user,
            [it.model_dump() for it in payload.items],
            payload.shippingAddress,
            payload.paymentMethod,
            payload.customerNotes,
        )
    except OrderServiceException as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"success": True, "order": order_to_wire(order)}


@router.get("", summary="List my orders")
def list_orders(user: User = Depends(current_user), db: Session = Depends(get_db)):
    orders = OrderService(db).list_for_user(user)
    return {"success": True, "orders": [order_to_wire(o) for o in orders]}


@router.get("/{order_id}", summary="Get order")
def get_order(order_id: str, user: User = Depends(current_user), db: Session = Depends(get_db)):
    try:
        order = OrderService(db).get_for_user(user, order_id)
    except OrderServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"success": True, "order": order_to_wire(order)}


@router.put("/{order_id}/cancel", summary="Cancel order")
def cancel_order(order_id: str, user: User = Depends(current_user), db: Session = Depends(get_db)):
    try:
        order = OrderService(db).cancel(user, order_id)
    except OrderServiceException as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"success": True, "order": order_to_wire(order)}
