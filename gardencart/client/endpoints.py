from typing import Any, Dict, Optional

from gardencart.client.api_client import ApiClient
from gardencart.config import settings


class AuthAPI:
    def __init__(self, api: ApiClient):
        self.api = api

    def register(self, data: Dict) -> Any:
        return self.api.post("/auth/register", json=data)

    def login(self, data: Dict) -> Any:
        return self.api.post("/auth/login", json=data)

    def get_me(self) -> Any:
        return self.api.get("/auth/me")


class MarketplaceAPI:
    def __init__(self, api: ApiClient):
        self.api = api

    # catalogue
    def get_products(self, params: Optional[Dict] = None) -> Any:
        return self.api.get("/marketplace/products", params=params)

    def get_product(self, product_id: str) -> Any:
        return self.api.get(f"/marketplace/products/{product_id}")

    def search_products(self, query: str) -> Any:
        return self.api.get("/marketplace/products", params={"q": query})

    # cart
    def get_cart(self) -> Any:
        return self.api.get("/marketplace/cart")

    def add_to_cart(self, product_id: str, quantity: int) -> Any:
        return self.api.post(
            "/marketplace/cart/add", json={"productId": product_id, "quantity": quantity}
        )

    def update_cart_item(self, item_id: str, quantity: int) -> Any:
        return self.api.put(f"/marketplace/cart/update/{item_id}", json={"quantity": quantity})

    def remove_cart_item(self, item_id: str) -> Any:
        return self.api.delete(f"/marketplace/cart/remove/{item_id}")

    def clear_cart(self) -> Any:
        return self.api.delete("/marketplace/cart/clear")

    # orders
    def create_order(self, data: Dict) -> Any:
        return self.api.post("/marketplace/orders", json=data)

    def get_orders(self) -> Any:
        return self.api.get("/marketplace/orders")

    def get_order(self, order_id: str) -> Any:
        return self.api.get(f"/marketplace/orders/{order_id}")

    def cancel_order(self, order_id: str) -> Any:
        return self.api.put(f"/marketplace/orders/{order_id}/cancel")


class DiagnosisAPI:
    """Plant identification and health checks go to a slow external AI service."""

    def __init__(self, api: ApiClient, timeout: Optional[float] = None):
        self.api = api
        self.timeout = timeout or settings.DIAGNOSIS_TIMEOUT_SECONDS

    def identify_plant(self, image_base64: str) -> Any:
        return self.api.post(
            "/diagnosis/identify", json={"imageBase64": image_base64}, timeout=self.timeout
        )

    def diagnose_plant_health(self, plant_id: str, image_base64: str) -> Any:
        return self.api.post(
            "/diagnosis/health",
            json={"plantId": plant_id, "imageBase64": image_base64},
            timeout=self.timeout,
        )
