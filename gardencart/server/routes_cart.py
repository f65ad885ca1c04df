from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from gardencart.db import get_db
from gardencart.models.cart import Cart
from gardencart.models.user import User
from gardencart.repositories.cart_repo import CartRepository
from gardencart.repositories.product_repo import ProductRepository
from gardencart.schemas.cart_schema import cart_to_wire
from gardencart.server.deps import current_user
from gardencart.server.serializers import cart_item_to_wire

router = APIRouter(prefix="/api/marketplace/cart", tags=["cart"])


class AddItemIn(BaseModel):
    productId: str
    quantity: int = 1


class UpdateQuantityIn(BaseModel):
    quantity: int


def _cart_response(request: Request, cart: Cart, message: str = None) -> dict:
    """
    Render the cart in the configured shape: `nested` ({cart: {items}}),
    `flat` ({items}) or, for mutations only, `ack` (no items at all).
    """
    shape = request.app.state.cart_response_shape
    items = [cart_item_to_wire(it) for it in cart.items]
    if shape == "ack" and message:
        return {"success": True, "message": message}
    if shape == "flat":
        return {"success": True, "items": items}
    return {"success": True, "cart": cart_to_wire(items)}


@router.get("", summary="Get cart")
def get_cart(request: Request, user: User = Depends(current_user), db: Session = Depends(get_db)):
    cart = CartRepository(db).get_or_create_for_user(user.id)
    db.commit()
    return _cart_response(request, cart)


@router.post("/add", summary="Add item to cart")
def add_item(
    payload: AddItemIn,
    request: Request,
    user: User = Depends(current_user),
    db: Session = Depends(get_db),
):
    if payload.quantity <= 0:
        raise HTTPException(status_code=400, detail="Quantity must be positive")
    product = ProductRepository(db).get(payload.productId)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    repo = CartRepository(db)
    cart = repo.get_or_create_for_user(user.id)
    repo.add_item(cart, product, payload.quantity)
    db.commit()
    db.refresh(cart)
    return _cart_response(request, cart, "Item added to cart")


@router.put("/update/{item_id}", summary="Update item quantity")
def update_item(
    item_id: str,
    payload: UpdateQuantityIn,
    request: Request,
    user: User = Depends(current_user),
    db: Session = Depends(get_db),
):
    if payload.quantity <= 0:
        raise HTTPException(status_code=400, detail="Quantity must be positive")
    repo = CartRepository(db)
    cart = repo.get_or_create_for_user(user.id)
    item = repo.get_item(cart, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Cart item not found")
    repo.set_quantity(item, payload.quantity)
    db.commit()
    db.refresh(cart)
    return _cart_response(request, cart, "Cart updated")


@router.delete("/remove/{item_id}", summary="Remove item")
def remove_item(
    item_id: str,
    request: Request,
    user: User = Depends(current_user),
    db: Session = Depends(get_db),
):
    repo = CartRepository(db)
    cart = repo.get_or_create_for_user(user.id)
    item = repo.get_item(cart, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Cart item not found")
    repo.remove_item(cart, item)
    db.commit()
    db.refresh(cart)
    return _cart_response(request, cart, "Item removed from cart")


@router.delete("/clear", summary="Clear cart")
def clear_cart(request: Request, user: User = Depends(current_user), db: Session = Depends(get_db)):
    repo = CartRepository(db)
    cart = repo.get_or_create_for_user(user.id)
    repo.clear(cart)
    db.commit()
    db.refresh(cart)
    return _cart_response(request, cart, "Cart cleared")
