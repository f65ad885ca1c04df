from typing import Dict, List, Optional
from uuid import uuid4

from sqlalchemy.orm import Session

from gardencart.models.order import CANCELLABLE_STATUSES, Order, OrderLine
from gardencart.models.user import User
from gardencart.repositories.cart_repo import CartRepository
from gardencart.repositories.product_repo import ProductRepository
from gardencart.schemas.order_schema import PaymentMethod
from gardencart.services.pricing import compute_subtotal, compute_totals
from gardencart.utils.logs import get_logger

log = get_logger("server")


class OrderServiceException(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class OrderService:
    def __init__(self, db: Session):
        self.db = db
        self.products = ProductRepository(db)
        self.carts = CartRepository(db)

    def _gen_order_number(self) -> str:
        return f"ORD-{uuid4().hex[:10].upper()}"

    def create_order(
        self,
        user: User,
        items: List[Dict],
        shipping_address: Dict,
        payment_method: str,
        customer_notes: Optional[str] = None,
    ) -> Order:
        """
        items: list of {product: str, quantity: int}; any client-sent price
        is ignored, the current catalogue price becomes the line's snapshot.
        """
        if not items:
            raise OrderServiceException("No order items")
        try:
            method = PaymentMethod(payment_method)
        except ValueError:
            raise OrderServiceException(f"Unsupported payment method: {payment_method}")

        lines = []
        for it in items:
            product = self.products.get(it["product"])
            if not product:
                raise OrderServiceException(f"Product not found: {it['product']}", 404)
            qty = int(it["quantity"])
            if qty <= 0:
                raise OrderServiceException("Quantity must be positive")
            if product.stock < qty:
                raise OrderServiceException(f"Insufficient stock for {product.name}")
            lines.append((product, qty))

        totals = compute_totals(compute_subtotal((p.price, qty) for p, qty in lines))
        order = Order(
            order_number=self._gen_order_number(),
            user_id=user.id,
            status="pending",
            payment_method=method.value,
            shipping_address=shipping_address,
            customer_notes=customer_notes,
            subtotal=totals.subtotal,
            shipping=totals.shipping,
            tax=totals.tax,
            discount=totals.discount,
            total=totals.grand_total,
        )
        for product, qty in lines:
            order.lines.append(
                OrderLine(
                    product_id=product.id,
                    name=product.name,
                    quantity=qty,
                    unit_price=product.price,
                )
            )
            product.stock -= qty
        self.db.add(order)

        # ordered items leave the cart
        self.carts.clear(self.carts.get_or_create_for_user(user.id))
        self.db.commit()
        self.db.refresh(order)
        log.info(f"Order {order.order_number} created for user={user.id} total={order.total}")
        return order

    def list_for_user(self, user: User) -> List[Order]:
        return (
            self.db.query(Order)
            .filter(Order.user_id == user.id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def get_for_user(self, user: User, order_id) -> Order:
        try:
            oid = int(order_id)
        except (TypeError, ValueError):
            oid = None
        order = (
            self.db.query(Order).filter(Order.id == oid, Order.user_id == user.id).first()
            if oid is not None
            else None
        )
        if not order:
            raise OrderServiceException("Order not found", 404)
        return order

    def cancel(self, user: User, order_id) -> Order:
        order = self.get_for_user(user, order_id)
        if order.status not in CANCELLABLE_STATUSES:
            raise OrderServiceException(f"Order cannot be cancelled once {order.status}")
        order.status = "cancelled"
        for ln in order.lines:
            product = self.products.get(ln.product_id)
            if product:
                product.stock += ln.quantity
        self.db.commit()
        self.db.refresh(order)
        return order
