#!/usr/bin/env python3
"""
Smoke test for a Proposal Commissions deployment
Checks that the main read-only API routes respond
"""
import os
import sys

import requests

# Base URL - override with SMOKE_BASE_URL
BASE_URL = os.getenv("SMOKE_BASE_URL", "http://localhost:8000")

# Routes to test
ROUTES = [
    ("/health", "Health"),
    ("/api/proposals", "Proposals"),
    ("/api/partners", "Partners"),
    ("/api/service-types", "Service types"),
    ("/api/kpis", "KPIs"),
]

def check_route(path, name):
    """Request a single route"""
    url = BASE_URL + path
    try:
        response = requests.get(url, timeout=10)
        if response.status_code == 200:
            print(f"✓ {name:20} - OK (200)")
            return True
        else:
            print(f"✗ {name:20} - FAILED (Status: {response.status_code})")
            return False
    except requests.exceptions.RequestException as e:
        print(f"✗ {name:20} - ERROR: {str(e)}")
        return False

def main():
    """Run smoke tests"""
    print(f"\n🔍 Running smoke tests on {BASE_URL}\n")
    print("-" * 50)

    results = []
    for path, name in ROUTES:
        results.append(check_route(path, name))

    print("-" * 50)
    passed = sum(results)
    total = len(results)
    print(f"\n✅ Passed: {passed}/{total}")

    if passed == total:
        print("🎉 All smoke tests passed!")
        sys.exit(0)
    else:
        print("❌ Some tests failed")
        sys.exit(1)

if __name__ == "__main__":
    main()
