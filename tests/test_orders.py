import pytest

from gardencart.client.api_client import ApiClient
from gardencart.client.endpoints import MarketplaceAPI
from gardencart.services.checkout_service import CheckoutFlow
from gardencart.services.order_history_service import OrderHistory
from gardencart.session_store import MemorySessionStore

from conftest import ADDRESS, FAKE_BASE, FakeHttp, FakeResponse, product_id


def _order(cart, api, sku, quantity=1):
    cart.add_to_cart(product_id(api, sku), quantity)
    flow = CheckoutFlow(cart)
    flow.update_shipping_info(**ADDRESS)
    flow.next_step()
    flow.next_step()
    assert flow.place_order(), flow.error
    return flow.order


@pytest.fixture
def history(api):
    return OrderHistory(api)


def _stock(api, sku):
    pid = product_id(api, sku)
    return MarketplaceAPI(api).get_product(pid)["product"]["stock"]


def test_fetch_orders_newest_first(api, cart, signed_in, history):
    first = _order(cart, api, "SEED-TOM")
    second = _order(cart, api, "FERT-VERMI", 2)

    orders = history.fetch_orders()
    assert [o.order_number for o in orders] == [second.order_number, first.order_number]
    assert orders[0].items[0].quantity == 2
    assert history.error == ""


def test_no_orders_yet(cart, signed_in, history):
    assert history.fetch_orders() == []


def test_cancel_restores_stock(api, cart, signed_in, history):
    before = _stock(api, "POT-CER-10")
    order = _order(cart, api, "POT-CER-10", 3)
    assert _stock(api, "POT-CER-10") == before - 3

    history.fetch_orders()
    res = history.cancel_order(order.id)
    assert res["success"]
    assert res["order"].status == "cancelled"
    assert history.orders[0].status == "cancelled"
    assert _stock(api, "POT-CER-10") == before

    again = history.cancel_order(order.id)
    assert again == {"success": False, "message": "Order cannot be cancelled once cancelled"}


def test_unknown_order(cart, signed_in, history):
    assert history.get_order("424242") is None
    assert history.error == "Failed to load order"
    res = history.cancel_order("424242")
    assert res == {"success": False, "message": "Order not found"}


def test_orders_under_data_key():
    wire = {
        "_id": "o1",
        "orderNumber": "ORD-1",
        "items": [{"product": "p1", "quantity": 1, "price": 100}],
        "shippingAddress": {"fullName": "Rina", "city": "Dhaka"},
        "paymentMethod": "bkash",
        "subtotal": 100,
        "shipping": 60,
        "tax": 5,
        "totalAmount": 165,
    }
    http = FakeHttp({("GET", "/marketplace/orders"): {"success": True, "data": [wire]}})
    history = OrderHistory(ApiClient(MemorySessionStore(), base_url=FAKE_BASE, http=http))
    orders = history.fetch_orders()
    assert [o.id for o in orders] == ["o1"]
    assert orders[0].shipping_address.full_name == "Rina"
    assert orders[0].customer_notes == ""


def test_fetch_failure_empties_list():
    http = FakeHttp(
        {("GET", "/marketplace/orders"): FakeResponse(500, {"message": "boom"}, "Server Error")}
    )
    history = OrderHistory(ApiClient(MemorySessionStore(), base_url=FAKE_BASE, http=http))
    history.orders = ["stale"]
    assert history.fetch_orders() == []
    assert history.error == "Failed to load orders"
