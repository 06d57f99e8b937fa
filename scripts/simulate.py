"""
Checkout Simulation Script

Drives the full order flow against a running API in development mode
(ENV_MODE=development, mock payment provider):

    checkout -> signed webhook (delivered twice) -> owner status walk

Many buyers check out concurrently and every webhook is delivered twice at
the same time, so the run also shows that each order is paid exactly once.

Run from project root: python scripts/simulate.py
"""

import argparse
import asyncio
import os
import random
import sys
import time
from datetime import datetime
from typing import Any

import httpx

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from restaurant_orders.core.config import get_settings  # noqa: E402
from restaurant_orders.services.payment.mock import (  # noqa: E402
    build_checkout_completed_payload,
    compute_signature_header,
)
from restaurant_orders.services.restaurants import demo_restaurant  # noqa: E402

# Configuration
API_BASE_URL = "http://localhost:7000"
TOTAL_ORDERS = 20

RESTAURANT = demo_restaurant()

# Sample data for random orders
FIRST_NAMES = ["John", "Jane", "Mike", "Sarah", "Tom", "Emma", "David", "Lisa", "Chris", "Amy"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis"]
STREETS = ["King St", "Queen St", "Yonge St", "Bloor St", "Dundas St", "Spadina Ave"]


def generate_random_delivery() -> dict[str, str]:
    """Generate random delivery details."""
    first = random.choice(FIRST_NAMES)
    last = random.choice(LAST_NAMES)
    return {
        "name": f"{first} {last}",
        "email": f"{first.lower()}.{last.lower()}@example.com",
        "addressLine1": f"{random.randint(1, 999)} {random.choice(STREETS)}",
        "city": "Toronto",
    }


def generate_random_cart() -> list[dict[str, Any]]:
    """Pick 1-3 distinct menu items with quantities (sent as strings, like the web client)."""
    items = random.sample(RESTAURANT.menu, k=random.randint(1, min(3, len(RESTAURANT.menu))))
    return [
        {"menuItemId": item.id, "name": item.name, "quantity": str(random.randint(1, 3))}
        for item in items
    ]


def expected_total(cart: list[dict[str, Any]]) -> int:
    prices = {item.id: item.price for item in RESTAURANT.menu}
    subtotal = sum(prices[line["menuItemId"]] * int(line["quantity"]) for line in cart)
    return subtotal + RESTAURANT.delivery_price


# =============================================================================
# SINGLE ORDER FLOW
# =============================================================================

async def run_order(
    client: httpx.AsyncClient,
    order_num: int,
    webhook_secret: str,
) -> dict[str, Any]:
    """Check out, deliver the payment webhook twice, and read the order back."""
    account_id = f"sim-buyer-{order_num}-{random.randint(1000, 9999)}"
    headers = {"X-Account-Id": account_id}
    cart = generate_random_cart()
    amount = expected_total(cart)
    start_time = time.time()

    try:
        response = await client.post(
            f"{API_BASE_URL}/api/order/checkout/create-checkout-session",
            json={
                "cartItems": cart,
                "deliveryDetails": generate_random_delivery(),
                "restaurantId": RESTAURANT.id,
            },
            headers=headers,
            timeout=30.0,
        )
        if response.status_code != 200:
            return {"order_num": order_num, "success": False, "error": response.text[:100]}

        orders = (await client.get(f"{API_BASE_URL}/api/order", headers=headers)).json()
        order_id = orders[0]["id"]

        payload = build_checkout_completed_payload(order_id, amount, restaurant_id=RESTAURANT.id)
        signature = compute_signature_header(payload, webhook_secret)
        deliveries = await asyncio.gather(*(
            client.post(
                f"{API_BASE_URL}/api/order/checkout/webhook",
                content=payload,
                headers={"Stripe-Signature": signature, "Content-Type": "application/json"},
            )
            for _ in range(2)
        ))
        outcomes = sorted(d.json().get("outcome", str(d.status_code)) for d in deliveries)

        order = (await client.get(f"{API_BASE_URL}/api/order", headers=headers)).json()[0]
        elapsed = round(time.time() - start_time, 3)

        return {
            "order_num": order_num,
            "success": order["status"] == "paid" and outcomes == ["duplicate", "paid"],
            "order_id": order_id,
            "total": order["totalAmount"],
            "expected": amount,
            "outcomes": outcomes,
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        return {"order_num": order_num, "success": False, "error": str(e)[:100]}


async def walk_lifecycle(client: httpx.AsyncClient, order_id: str) -> bool:
    """Move one order to delivered as the restaurant owner."""
    headers = {"X-Account-Id": RESTAURANT.owner_account_id}
    for status in ("inProgress", "outForDelivery", "delivered"):
        response = await client.patch(
            f"{API_BASE_URL}/api/my/restaurant/order/{order_id}/status",
            json={"status": status},
            headers=headers,
        )
        if response.status_code != 200:
            print(f"   ❌ {status}: {response.text[:100]}")
            return False
        print(f"   ✅ {order_id} -> {status}")

    intruder = await client.patch(
        f"{API_BASE_URL}/api/my/restaurant/order/{order_id}/status",
        json={"status": "placed"},
        headers={"X-Account-Id": "sim-intruder"},
    )
    print(f"   🔒 Non-owner update answered {intruder.status_code} (expected 403)")
    return intruder.status_code == 403


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    settings = get_settings()

    print("=" * 70)
    print("🔥 CHECKOUT SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"🍔 Restaurant: {RESTAURANT.name} ({RESTAURANT.id})")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient() as client:
        health = await client.get(f"{API_BASE_URL}/health")
        print(f"\n🩺 Health: {health.json().get('status')}")

        tasks = [run_order(client, i + 1, settings.webhook_secret) for i in range(num_orders)]
        results = await asyncio.gather(*tasks)

        successful = [r for r in results if r["success"]]
        failed = [r for r in results if not r["success"]]
        mismatched = [r for r in successful if r["total"] != r["expected"]]

        print("\n" + "=" * 70)
        print("📊 SIMULATION RESULTS")
        print("=" * 70)
        print(f"\n✅ Paid exactly once: {len(successful)}/{num_orders}")
        print(f"❌ Failed: {len(failed)}/{num_orders}")
        print(f"💰 Amount mismatches: {len(mismatched)}")
        print(f"⏱️  Total Time: {round(time.time() - start_time, 2)}s")

        if failed:
            print("\n⚠️  Failed Order Details (showing first 5):")
            for f in failed[:5]:
                print(f"   Order #{f['order_num']}: {f.get('error') or f.get('outcomes')}")

        lifecycle_ok = True
        if successful:
            print("\n🚚 Owner lifecycle walk...")
            lifecycle_ok = await walk_lifecycle(client, successful[0]["order_id"])

    print("=" * 70)
    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "lifecycle_ok": lifecycle_ok,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Checkout Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url.rstrip("/")
    summary = asyncio.run(run_simulation(num_orders=args.orders))
    sys.exit(0 if summary["failed"] == 0 and summary["lifecycle_ok"] else 1)
