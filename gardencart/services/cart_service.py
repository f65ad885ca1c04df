import enum
import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, List, Optional

from pydantic import ValidationError

from gardencart.client.api_client import ApiClient
from gardencart.client.endpoints import MarketplaceAPI
from gardencart.client.errors import (
    ApiError,
    ApiNetworkError,
    ApiResponseError,
    SessionExpiredError,
)
from gardencart.schemas.cart_schema import (
    CartLineItem,
    FlatCartResponse,
    NestedCartResponse,
    UnrecognizedCartResponse,
    classify_cart_response,
)
from gardencart.services.auth_service import AuthState
from gardencart.services.pricing import compute_subtotal
from gardencart.utils.logs import get_logger

log = get_logger("cart")

NOT_AUTHENTICATED_MESSAGE = "User not authenticated - please login first"


class CartErrorKind(enum.Enum):
    NOT_AUTHENTICATED = "not_authenticated"
    SESSION_EXPIRED = "session_expired"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"
    REQUEST_ERROR = "request_error"


@dataclass(frozen=True)
class CartError:
    kind: CartErrorKind
    message: str
    status: Optional[int] = None


@dataclass
class CartResult:
    ok: bool
    items: List[CartLineItem] = field(default_factory=list)
    error: Optional[CartError] = None


def classify_error(e: Exception) -> CartError:
    """Turn a failed call into a CartError with a message fit for the UI."""
    if isinstance(e, SessionExpiredError):
        return CartError(CartErrorKind.SESSION_EXPIRED, f"Server error: 401 - {e.message}", 401)
    if isinstance(e, ApiResponseError):
        return CartError(
            CartErrorKind.SERVER_ERROR,
            f"Server error: {e.status} - {e.message or 'Unknown error'}",
            e.status,
        )
    if isinstance(e, ApiNetworkError):
        return CartError(
            CartErrorKind.NETWORK_ERROR, "Network error: No response received from server"
        )
    return CartError(CartErrorKind.REQUEST_ERROR, f"Request error: {e}")


class CartState:
    """
    The current user's cart, always re-derived from what the backend returns.

    Every mutation replaces the local items with the server's answer (or
    refetches when the answer has no items in it); nothing is applied
    optimistically. Mutations are single-flight: a second call waits for
    the first to finish, so the final local state is the server's view
    after the last user action.
    """

    def __init__(self, api: ApiClient, auth: AuthState, auto_sync: bool = True):
        self.api = api
        self.auth = auth
        self.marketplace = MarketplaceAPI(api)
        self.items: List[CartLineItem] = []
        self.error = ""
        self.auto_sync = auto_sync
        self._mutation_lock = threading.Lock()
        auth.add_listener(self._on_auth_change)

    def _on_auth_change(self, auth: AuthState) -> None:
        if auth.is_authenticated:
            if self.auto_sync:
                self.fetch_cart_items()
        else:
            self.items = []

    def _not_authenticated(self) -> CartResult:
        log.error(NOT_AUTHENTICATED_MESSAGE)
        return CartResult(
            ok=False,
            items=list(self.items),
            error=CartError(CartErrorKind.NOT_AUTHENTICATED, NOT_AUTHENTICATED_MESSAGE),
        )

    def fetch_cart_items(self) -> CartResult:
        if not self.auth.is_authenticated:
            return self._not_authenticated()
        try:
            res = self.marketplace.get_cart()
            shape = classify_cart_response(res)
        except (ApiError, ValidationError) as e:
            err = classify_error(e)
            log.error(f"Error fetching cart items: {err.message}")
            self.error = f"Failed to load cart items: {getattr(e, 'message', str(e))}"
            self.items = []
            return CartResult(ok=False, error=err)
        if isinstance(shape, (NestedCartResponse, FlatCartResponse)):
            self.items = list(shape.items)
        else:
            self.items = []
        self.error = ""
        return CartResult(ok=True, items=list(self.items))

    def _apply(self, res: Any, on_unrecognized: Callable[[], CartResult]) -> CartResult:
        shape = classify_cart_response(res)
        if isinstance(shape, (NestedCartResponse, FlatCartResponse)):
            self.items = list(shape.items)
            return CartResult(ok=True, items=list(self.items))
        if isinstance(shape, UnrecognizedCartResponse):
            log.debug("Cart response has no items, falling back")
            return on_unrecognized()
        raise TypeError(f"unhandled cart response {shape!r}")

    def _mutate(self, label: str, call: Callable[[], Any], on_unrecognized=None) -> CartResult:
        if not self.auth.is_authenticated:
            return self._not_authenticated()
        with self._mutation_lock:
            try:
                res = call()
                return self._apply(res, on_unrecognized or self.fetch_cart_items)
            except (ApiError, ValidationError) as e:
                err = classify_error(e)
                log.error(f"Error {label}: {err.message}")
                return CartResult(ok=False, items=list(self.items), error=err)

    def add_to_cart(self, product_id: str, quantity: int = 1) -> CartResult:
        log.info(f"Adding to cart: product={product_id} quantity={quantity}")
        return self._mutate(
            "adding to cart", lambda: self.marketplace.add_to_cart(product_id, quantity)
        )

    def update_quantity(self, item_id: str, quantity: int) -> CartResult:
        if not self.auth.is_authenticated:
            return self._not_authenticated()
        if quantity < 1:
            return CartResult(ok=True, items=list(self.items))
        return self._mutate(
            "updating cart item quantity",
            lambda: self.marketplace.update_cart_item(item_id, quantity),
        )

    def remove_from_cart(self, item_id: str) -> CartResult:
        return self._mutate(
            "removing item from cart", lambda: self.marketplace.remove_cart_item(item_id)
        )

    def clear_cart(self) -> CartResult:
        def _reset():
            self.items = []
            return CartResult(ok=True)

        return self._mutate("clearing cart", self.marketplace.clear_cart, _reset)

    def get_cart_count(self) -> int:
        return sum(it.quantity for it in self.items)

    def get_cart_total(self) -> Decimal:
        return compute_subtotal((it.product.price, it.quantity) for it in self.items)
