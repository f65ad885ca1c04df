import enum
from typing import Dict, Optional

from pydantic import ValidationError

from gardencart.client.endpoints import MarketplaceAPI
from gardencart.client.errors import ApiError
from gardencart.schemas.order_schema import Order, PaymentMethod, ShippingAddress
from gardencart.services.cart_service import NOT_AUTHENTICATED_MESSAGE, CartState
from gardencart.services.pricing import CheckoutTotals, compute_totals
from gardencart.utils.logs import get_logger

log = get_logger("checkout")

SHIPPING_REQUIRED_MESSAGE = "Please fill in all required shipping information"


class CheckoutStep(enum.IntEnum):
    SHIPPING = 1
    PAYMENT = 2
    REVIEW = 3
    CONFIRMATION = 4


class CheckoutFlow:
    """
    Linear checkout wizard: shipping -> payment -> review -> confirmation.

    Going forward from SHIPPING needs the required address fields; REVIEW
    only moves on through a successful `place_order()`. CONFIRMATION is
    terminal. Validation problems are kept in `error` and never reach the
    network.
    """

    def __init__(self, cart: CartState, discount=0):
        self.cart = cart
        self.marketplace = MarketplaceAPI(cart.api)
        self.step = CheckoutStep.SHIPPING
        self.shipping_info = ShippingAddress()
        self.payment_method = PaymentMethod.CASH_ON_DELIVERY
        self.customer_notes = ""
        self.discount = discount
        self.order: Optional[Order] = None
        self.error = ""
        self.placing_order = False

    def update_shipping_info(self, **fields) -> bool:
        by_alias = {f.alias: name for name, f in ShippingAddress.model_fields.items() if f.alias}
        fields = {by_alias.get(k, k): v for k, v in fields.items()}
        merged = {**self.shipping_info.model_dump(), **fields}
        try:
            self.shipping_info = ShippingAddress.model_validate(merged)
        except ValidationError as e:
            log.info(f"Rejected shipping update: {e.error_count()} invalid field(s)")
            self.error = "Please check the shipping information"
            return False
        self.error = ""
        return True

    def set_payment_method(self, method) -> bool:
        try:
            self.payment_method = PaymentMethod(method)
        except ValueError:
            log.info(f"Rejected payment method: {method!r}")
            self.error = "Please choose a payment method"
            return False
        self.error = ""
        return True

    def totals(self) -> CheckoutTotals:
        return compute_totals(self.cart.get_cart_total(), self.discount)

    def next_step(self) -> bool:
        if self.step is CheckoutStep.SHIPPING:
            missing = self.shipping_info.missing_fields()
            if missing:
                log.info(f"Shipping step blocked, missing: {', '.join(missing)}")
                self.error = SHIPPING_REQUIRED_MESSAGE
                return False
        elif self.step is not CheckoutStep.PAYMENT:
            # REVIEW advances only by placing the order; CONFIRMATION is final
            return False
        self.error = ""
        self.step = CheckoutStep(self.step + 1)
        return True

    def prev_step(self) -> bool:
        if self.step in (CheckoutStep.PAYMENT, CheckoutStep.REVIEW):
            self.step = CheckoutStep(self.step - 1)
            self.error = ""
            return True
        return False

    def build_order_payload(self) -> Dict:
        return {
            "items": [
                {
                    "product": it.product.id,
                    "quantity": it.quantity,
                    "price": str(it.product.price),
                }
                for it in self.cart.items
            ],
            "shippingAddress": self.shipping_info.to_wire(),
            "paymentMethod": self.payment_method.value,
            "customerNotes": self.customer_notes,
        }

    def place_order(self) -> bool:
        if self.step is not CheckoutStep.REVIEW:
            self.error = "Review your order before placing it"
            return False
        if not self.cart.auth.is_authenticated:
            self.error = NOT_AUTHENTICATED_MESSAGE
            return False
        if not self.cart.items:
            self.error = "Your cart is empty"
            return False

        self.placing_order = True
        self.error = ""
        try:
            res = self.marketplace.create_order(self.build_order_payload())
            order = Order.model_validate((res or {}).get("order"))
        except ApiError as e:
            log.error(f"Error placing order: {e.message}")
            self.error = f"Failed to place order: {e.message}"
            return False
        except ValidationError as e:
            log.error(f"Unreadable order in response: {e}")
            self.error = "Failed to place order"
            return False
        finally:
            self.placing_order = False

        self.order = order
        self.step = CheckoutStep.CONFIRMATION
        log.info(f"Order placed: {order.order_number}")
        # the backend empties the cart once the order exists
        self.cart.fetch_cart_items()
        return True
