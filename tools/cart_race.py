"""
Fire concurrent quantity changes at one cart and report what survives.

Every worker shares a single CartState, so the mutations go through its
single-flight lock; the final local quantity must equal the server's.

    python tools/cart_race.py --email me@example.com --password secret --workers 8
"""
import argparse
import concurrent.futures
import os

from gardencart.client.api_client import ApiClient
from gardencart.services.auth_service import AuthState
from gardencart.services.cart_service import CartState
from gardencart.session_store import MemorySessionStore

BASE = os.environ.get("GARDENCART_API", "http://127.0.0.1:8000/api")


def run(workers, email, password, product_id):
    api = ApiClient(MemorySessionStore(), base_url=BASE)
    auth = AuthState(api)
    res = auth.login(email, password)
    if not res.success:
        print("Login failed:", res.message)
        return
    cart = CartState(api, auth)
    added = cart.add_to_cart(product_id, 1)
    if not added.ok:
        print("Add failed:", added.error.message)
        return
    item_id = next(it.id for it in cart.items if it.product.id == product_id)

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(cart.update_quantity, item_id, q) for q in range(1, workers + 1)]
        results = [f.result() for f in futures]
    print("ok:", sum(r.ok for r in results), "failed:", sum(not r.ok for r in results))

    local = next(it.quantity for it in cart.items if it.id == item_id)
    cart.fetch_cart_items()
    server = next(it.quantity for it in cart.items if it.id == item_id)
    print(f"local quantity={local} server quantity={server} consistent={local == server}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concurrent cart mutation check.")
    parser.add_argument("--workers", type=int, default=8)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--product", default="1")
    args = parser.parse_args()
    run(args.workers, args.email, args.password, args.product)
