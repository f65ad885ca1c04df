from typing import Optional

from sqlalchemy.orm import Session

from gardencart.models.cart import Cart
from gardencart.models.cart_item import CartItem
from gardencart.models.product import Product


class CartRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_or_create_for_user(self, user_id: int) -> Cart:
        c = self.db.query(Cart).filter(Cart.user_id == user_id).first()
        if c:
            return c
        c = Cart(user_id=user_id)
        self.db.add(c)
        self.db.flush()
        return c

    def get_item(self, cart: Cart, item_id) -> Optional[CartItem]:
        try:
            iid = int(item_id)
        except (TypeError, ValueError):
            return None
        return (
            self.db.query(CartItem)
            .filter(CartItem.id == iid, CartItem.cart_id == cart.id)
            .first()
        )

    def add_item(self, cart: Cart, product: Product, qty: int) -> CartItem:
        # adding a product already in the cart bumps its quantity
        item = next((it for it in cart.items if it.product_id == product.id), None)
        if item:
            item.quantity += qty
        else:
            item = CartItem(cart_id=cart.id, product_id=product.id, quantity=qty)
            self.db.add(item)
            cart.items.append(item)
        self.db.flush()
        return item

    def set_quantity(self, item: CartItem, qty: int) -> CartItem:
        item.quantity = qty
        self.db.flush()
        return item

    def remove_item(self, cart: Cart, item: CartItem) -> None:
        cart.items.remove(item)
        self.db.flush()

    def clear(self, cart: Cart) -> None:
        cart.items.clear()
        self.db.flush()
