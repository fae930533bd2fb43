import httpx
import asyncio
import os
import sys
from typing import Optional

BASE_URL = os.environ.get("SHORTLINK_BASE_URL", "http://localhost:8000")

async def run_verification(transport: Optional[httpx.AsyncBaseTransport] = None) -> bool:
    print(f"🚀  Starting Verification against {BASE_URL}...\n")
    failed = False

    async with httpx.AsyncClient(base_url=BASE_URL, transport=transport, timeout=10.0) as client:
        # 1. Health Check
        print("1. [Health] Checking /health...")
        try:
            resp = await client.get("/health")
            if resp.status_code == 200 and resp.json() == {"status": "ok"}:
                print("   ✅  Health Check Passed")
            else:
                print(f"   ❌  Health Check Failed: {resp.text}")
                return False
        except httpx.HTTPError as e:
            print(f"   ❌  Connection Error: {e}")
            return False

        # 2. Create Link
        print("\n2. [API] Creating Short Link...")
        target_url = "https://www.example.com/verify"
        code = "verify01"

        # Cleanup first if exists
        await client.delete(f"/api/links/{code}")

        resp = await client.post("/api/links", json={"targetUrl": target_url, "code": code})
        if resp.status_code == 201:
            print(f"   ✅  Created: {BASE_URL}/{resp.json()['code']}")
        else:
            print(f"   ❌  Create Failed: {resp.status_code} {resp.text}")
            return False

        # 3. Duplicate code
        print("\n3. [API] Verifying Code Conflict...")
        resp = await client.post("/api/links", json={"targetUrl": "https://other.example", "code": code})
        if resp.status_code == 409:
            print("   ✅  Duplicate code rejected")
        else:
            print(f"   ❌  Expected 409, got {resp.status_code}")
            failed = True

        # 4. Verify Redirect
        print("\n4. [API] Verifying Redirect...")
        for _ in range(3):
            resp = await client.get(f"/{code}", follow_redirects=False)
        if resp.status_code == 302 and resp.headers.get("location") == target_url:
            print(f"   ✅  Redirect Location matches: {resp.headers['location']}")
        else:
            print(f"   ❌  Redirect Failed: {resp.status_code} {resp.headers.get('location')}")
            failed = True

        # 5. Verify Counter
        print("\n5. [API] Verifying Click Count...")
        resp = await client.get(f"/api/links/{code}")
        if resp.status_code == 200 and resp.json()["totalClicks"] == 3:
            print(f"   ✅  Click Count updated: {resp.json()['totalClicks']}")
        else:
            print(f"   ❌  Click Count wrong: {resp.status_code} {resp.text}")
            failed = True

        # 6. Delete
        print("\n6. [API] Verifying Delete...")
        resp = await client.delete(f"/api/links/{code}")
        gone = await client.get(f"/{code}", follow_redirects=False)
        if resp.status_code == 200 and gone.status_code == 404:
            print("   ✅  Link deleted and no longer redirects")
        else:
            print(f"   ❌  Delete Failed: {resp.status_code} / redirect {gone.status_code}")
            failed = True

        # 7. Metrics
        print("\n7. [Observability] Verifying Metrics...")
        resp = await client.get("/metrics")
        if resp.status_code == 200 and "http_requests_total" in resp.text:
            print("   ✅  Metrics Endpoint Exposed")
        else:
            print(f"   ❌  Metrics Failed: {resp.status_code}")
            failed = True

    print("\n✨ Verification Complete!" if not failed else "\n💥 Verification Failed")
    return not failed

if __name__ == "__main__":
    sys.exit(0 if asyncio.run(run_verification()) else 1)
