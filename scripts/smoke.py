"""
End-to-End Smoke Script

Drives the admin bootstrap and checkout flow against a running server.
The server must run with OPEN_ADMIN_PROMOTION=true so the first admin
can be created.

Run from project root:
    OPEN_ADMIN_PROMOTION=true uvicorn app.main:app --port 5000
    python scripts/smoke.py --base-url http://localhost:5000
"""

import argparse
import asyncio
import sys
import time
import uuid
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

MENU_ITEMS = [
    {"name": "Caesar Salad", "category": "salad", "price": 12.5},
    {"name": "Tomato Soup", "category": "soup", "price": 7.25},
    {"name": "Margherita Pizza", "category": "pizza", "price": 14.99},
]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def check(label: str, response: httpx.Response, expected_status: int = 200) -> Any:
    """Print one step and stop the run on an unexpected status."""
    ok = response.status_code == expected_status
    print(f"{'✅' if ok else '❌'} {label} → {response.status_code}")
    if not ok:
        print(f"   {response.text}")
        raise SystemExit(1)
    return response.json()


async def sign_in(client: httpx.AsyncClient, email: str, uid: str) -> tuple[str, str]:
    """Register a fresh user and fetch a session token; returns (user id, token)."""
    created = check(f"create user {email}", await client.post("/users", json={"email": email, "userUid": uid}))
    token = check(f"issue token {uid}", await client.post("/jwt", json={"uid": uid}))
    return created["insertedId"], token


async def run_smoke(base_url: str) -> None:
    run_id = uuid.uuid4().hex[:8]
    admin_uid, user_uid = f"admin-{run_id}", f"user-{run_id}"
    start_time = time.time()

    print("=" * 60)
    print(f"🔍 SMOKE RUN {run_id} against {base_url}")
    print("=" * 60)

    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        admin_id, admin_token = await sign_in(client, f"{admin_uid}@example.com", admin_uid)
        _, user_token = await sign_in(client, f"{user_uid}@example.com", user_uid)

        check("list users before promotion", await client.get("/users", headers=bearer(admin_token)), 403)
        check("promote admin", await client.patch(f"/users/admin/{admin_id}"))
        check("list users as regular user", await client.get("/users", headers=bearer(user_token)), 403)

        users = check("list users as admin", await client.get("/users", headers=bearer(admin_token)))
        print(f"   {len(users)} users")

        check("admin status", await client.get(f"/users/admin/{admin_uid}", headers=bearer(admin_token)))

        # Menu
        menu_ids = []
        for item in MENU_ITEMS:
            created = check(f"create menu item {item['name']}",
                            await client.post("/menu", json=item, headers=bearer(admin_token)))
            menu_ids.append(created["insertedId"])

        # Cart
        cart_ids = []
        for menu_id, item in zip(menu_ids, MENU_ITEMS):
            created = check(f"add {item['name']} to cart", await client.post("/carts", json={
                "userUid": user_uid, "menuItemId": menu_id, "name": item["name"], "price": item["price"],
            }))
            cart_ids.append(created["insertedId"])

        cart = check("list cart", await client.get("/carts", params={"uid": user_uid},
                                                   headers=bearer(user_token)))
        check("list someone else's cart",
              await client.get("/carts", params={"uid": admin_uid}, headers=bearer(user_token)), 403)
        total = round(sum(c["price"] for c in cart), 2)

        # Checkout
        intent = check("create payment intent", await client.post(
            "/create-payment-intent",
            json={"price": total},
            headers={**bearer(user_token), "Idempotency-Key": f"smoke-{run_id}"},
        ))
        print(f"   client secret received ({len(intent['clientSecret'])} chars)")

        recorded = check("record payment", await client.post("/payments", json={
            "price": total,
            "cartItems": cart_ids,
            "transactionId": f"smoke-{run_id}",
            "email": f"{user_uid}@example.com",
        }, headers=bearer(user_token)))
        print(f"   cart items deleted: {recorded['deleteResult']['deletedCount']}")

        stats = check("admin stats", await client.get("/admin-stats", headers=bearer(admin_token)))
        print(f"   {stats}")

        # Cleanup menu items
        for menu_id in menu_ids:
            await client.delete(f"/menu/{menu_id}", headers=bearer(admin_token))

    print("=" * 60)
    print(f"✅ SMOKE RUN COMPLETE in {round(time.time() - start_time, 2)}s")
    print("=" * 60)


def main() -> None:
    parser = argparse.ArgumentParser(description="End-to-end smoke run")
    parser.add_argument("--base-url", default="http://localhost:5000")
    args = parser.parse_args()
    asyncio.run(run_smoke(args.base_url))


if __name__ == "__main__":
    main()
