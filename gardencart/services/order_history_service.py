from typing import Dict, List, Optional

from pydantic import ValidationError

from gardencart.client.api_client import ApiClient
from gardencart.client.endpoints import MarketplaceAPI
from gardencart.client.errors import ApiError
from gardencart.schemas.order_schema import Order
from gardencart.utils.logs import get_logger

log = get_logger("orders")


def _orders_from(res) -> list:
    if isinstance(res, dict):
        for key in ("orders", "data"):
            if isinstance(res.get(key), list):
                return res[key]
    return []


class OrderHistory:
    """Past orders of the signed-in user; the only mutation is cancel."""

    def __init__(self, api: ApiClient):
        self.marketplace = MarketplaceAPI(api)
        self.orders: List[Order] = []
        self.error = ""

    def fetch_orders(self) -> List[Order]:
        try:
            res = self.marketplace.get_orders()
            self.orders = [Order.model_validate(o) for o in _orders_from(res)]
            self.error = ""
        except (ApiError, ValidationError) as e:
            log.error(f"Error fetching orders: {e}")
            self.error = "Failed to load orders"
            self.orders = []
        return self.orders

    def get_order(self, order_id: str) -> Optional[Order]:
        try:
            res = self.marketplace.get_order(order_id)
            return Order.model_validate((res or {}).get("order"))
        except (ApiError, ValidationError) as e:
            log.error(f"Error fetching order {order_id}: {e}")
            self.error = "Failed to load order"
            return None

    def cancel_order(self, order_id: str) -> Dict:
        try:
            res = self.marketplace.cancel_order(order_id)
            cancelled = Order.model_validate((res or {}).get("order"))
        except ApiError as e:
            log.error(f"Error cancelling order {order_id}: {e.message}")
            return {"success": False, "message": e.message}
        except ValidationError as e:
            log.error(f"Unreadable order in cancel response: {e}")
            return {"success": False, "message": "Failed to cancel order"}
        self.orders = [cancelled if o.id == cancelled.id else o for o in self.orders]
        return {"success": True, "order": cancelled}
