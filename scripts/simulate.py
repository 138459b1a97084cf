"""
Lifecycle Simulation Script

Fires concurrent creates against a running backend, then drives every new
order through assign and advance calls in parallel, the way several admin
and driver screens would. Useful to watch the realtime rooms light up.

Run from project root: python scripts/simulate.py --orders 30

Author: Khalil_Bannouri
Version: 1.0.0
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:8080"
TOTAL_ORDERS = 30

TENANT_IDS = ["t_wis", "t_cafe", "t_fnb"]
NAMES = ["Nguyễn An", "Trần Bình", "Lê Chi", "Phạm Dũng", "Hoàng Em", "Võ Giang", "Đặng Hà"]
PLACES = ["Kho Tân Bình, HCM", "Q.1, HCM", "Q.3, HCM", "Q.7, HCM", "Thủ Đức, HCM", "Bình Thạnh, HCM"]
GOODS = ["Thùng sữa 24 hộp", "Cà phê hạt 1kg", "Nước suối 500ml", "Suất cơm văn phòng", "Bánh mì"]


def generate_order_payload() -> dict[str, Any]:
    """Generate a random create payload."""
    origin, destination = random.sample(PLACES, 2)
    return {
        "tenantId": random.choice(TENANT_IDS),
        "customer": {
            "name": random.choice(NAMES),
            "phone": f"09{random.randint(10, 99)} {random.randint(100, 999)} {random.randint(100, 999)}",
        },
        "from": origin,
        "to": destination,
        "items": [{"name": random.choice(GOODS), "qty": random.randint(1, 5)}],
        "price": random.choice([25000, 45000, 60000, 120000]),
    }


async def create_order(client: httpx.AsyncClient, order_num: int) -> dict[str, Any]:
    """Create one order and report timing."""
    start_time = time.time()
    try:
        response = await client.post(f"{API_BASE_URL}/api/orders", json=generate_order_payload(), timeout=30.0)
        elapsed = round(time.time() - start_time, 3)
        if response.status_code == 201:
            data = response.json()
            return {"order_num": order_num, "success": True, "id": data["id"], "code": data["code"], "time": elapsed}
        return {"order_num": order_num, "success": False, "error": response.text[:100], "time": elapsed}
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {"order_num": order_num, "success": False, "error": str(e)[:100], "time": elapsed}


async def drive_order(client: httpx.AsyncClient, order_id: str) -> str:
    """Assign a driver, then advance a random number of steps; returns final status."""
    response = await client.patch(f"{API_BASE_URL}/api/orders/{order_id}/assign", timeout=30.0)
    response.raise_for_status()
    status = response.json()["status"]

    for _ in range(random.randint(0, 5)):
        await asyncio.sleep(random.uniform(0.01, 0.1))
        response = await client.patch(f"{API_BASE_URL}/api/orders/{order_id}/status", timeout=30.0)
        response.raise_for_status()
        status = response.json()["status"]
    return status


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    """
    Run the simulation.

    Args:
        num_orders: Number of orders to create and drive
    """
    print("=" * 70)
    print("🚚 ORDER LIFECYCLE SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient() as client:
        health = await client.get(f"{API_BASE_URL}/api/health")
        if health.status_code != 200 or not health.json().get("ok"):
            print(f"❌ Backend not healthy: {health.text[:100]}")
            return {"total": num_orders, "successful": 0, "failed": num_orders}

        print("\n🚀 Creating orders...\n")
        results = await asyncio.gather(*(create_order(client, i + 1) for i in range(num_orders)))
        successful = [r for r in results if r["success"]]

        print("🚀 Assigning and advancing...\n")
        outcomes = await asyncio.gather(
            *(drive_order(client, r["id"]) for r in successful),
            return_exceptions=True,
        )

    total_time = round(time.time() - start_time, 2)
    failed = [r for r in results if not r["success"]]
    drive_errors = [o for o in outcomes if isinstance(o, Exception)]
    statuses: dict[str, int] = {}
    for outcome in outcomes:
        if isinstance(outcome, str):
            statuses[outcome] = statuses.get(outcome, 0) + 1

    print("=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Created: {len(successful)}/{num_orders}")
    print(f"❌ Failed creates: {len(failed)}")
    print(f"⚠️  Failed drives: {len(drive_errors)}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print(f"\n📈 Average create response: {avg_time}s")

    print("\n📦 Final statuses:")
    for status, count in sorted(statuses.items()):
        print(f"   {status:<18} {count}")

    for f in failed[:5]:
        print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("\n" + "=" * 70)
    print("🔍 Next: python scripts/verify.py")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "statuses": statuses,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Order lifecycle simulation")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--base-url", default=API_BASE_URL, help="Backend base URL")
    args = parser.parse_args()

    API_BASE_URL = args.base_url.rstrip("/")
    asyncio.run(run_simulation(args.orders))
