#!/usr/bin/env python3
"""
ItemVault Quickstart — full lifecycle in one script.

Signs up two users, creates items as the first, and shows that the
second cannot see or touch them.
Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:8000
"""

import sys
import uuid

import httpx

BASE = "http://localhost:8000/api/v1"
PASSWORD = "demo-password-123"


def signup(client: httpx.Client, name: str, run_id: str) -> dict:
    resp = client.post("/auth/signup", json={
        "email": f"{name}-{run_id}@example.com",
        "username": f"{name}_{run_id}",
        "password": PASSWORD,
    })
    assert resp.status_code == 201, f"Failed: {resp.text}"
    return resp.json()


def main():
    run_id = uuid.uuid4().hex[:6]
    client = httpx.Client(base_url=BASE, timeout=10)

    # ── Health check ──────────────────────────────────────────────
    print("Checking backend health...")
    try:
        resp = client.get("/health")
    except httpx.ConnectError:
        print(f"Backend not reachable at {BASE}")
        print("Start it with:  itemvault serve")
        sys.exit(1)
    health = resp.json()
    print(f"  Status:   {health['status']}")
    print(f"  Database: {'✓' if health['database'] == 'ok' else '✗'}")

    # ── Sign up ───────────────────────────────────────────────────
    print("\n1. Signing up alice and bob...")
    alice = signup(client, "alice", run_id)
    bob = signup(client, "bob", run_id)
    print(f"   alice: {alice['user']['id'][:8]}...")
    print(f"   bob:   {bob['user']['id'][:8]}...")

    # ── Log in ────────────────────────────────────────────────────
    print("\n2. Logging in as alice...")
    resp = client.post("/auth/login", json={
        "email": alice["user"]["email"], "password": PASSWORD,
    })
    assert resp.status_code == 200, f"Failed: {resp.text}"
    as_alice = {"Authorization": f"Bearer {resp.json()['token']}"}
    as_bob = {"Authorization": f"Bearer {bob['token']}"}

    # ── Create items ──────────────────────────────────────────────
    print("\n3. Creating items as alice (with a spoofed owner_id)...")
    created = []
    for title in ("Write report", "Review budget"):
        resp = client.post("/items", headers=as_alice, json={
            "title": title, "owner_id": bob["user"]["id"],
        })
        assert resp.status_code == 201, f"Failed: {resp.text}"
        item = resp.json()
        assert item["owner_id"] == alice["user"]["id"]
        created.append(item)
        print(f"   {item['title']} → owner {item['owner_id'][:8]}... (alice)")

    # ── Update ────────────────────────────────────────────────────
    print("\n4. Marking the first item done...")
    resp = client.put(f"/items/{created[0]['id']}", headers=as_alice, json={"status": "done"})
    assert resp.status_code == 200, f"Failed: {resp.text}"
    print(f"   {resp.json()['title']}: {resp.json()['status']}")

    resp = client.get("/items", headers=as_alice, params={"status": "done"})
    print(f"   alice has {len(resp.json())} done item(s)")

    # ── Isolation ─────────────────────────────────────────────────
    print("\n5. Bob tries to reach alice's item...")
    target = created[0]["id"]
    for method in ("GET", "PUT", "DELETE"):
        kwargs = {"json": {"title": "hijacked"}} if method == "PUT" else {}
        resp = client.request(method, f"/items/{target}", headers=as_bob, **kwargs)
        print(f"   {method:6} → {resp.status_code}")
        assert resp.status_code == 404

    resp = client.get("/items", headers=as_bob)
    print(f"   bob's list: {len(resp.json())} item(s)")

    # ── No token ──────────────────────────────────────────────────
    print("\n6. Calling without a token...")
    resp = client.get("/items")
    print(f"   GET /items → {resp.status_code} {resp.json()['detail']}")

    # ── Clean up ──────────────────────────────────────────────────
    print("\n7. Deleting alice's items...")
    for item in created:
        resp = client.delete(f"/items/{item['id']}", headers=as_alice)
        assert resp.status_code == 204
    print("   Done.")


if __name__ == "__main__":
    main()
