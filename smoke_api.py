#!/usr/bin/env python3
"""
Manual smoke check against a running catalog API (see run_api.py).

Usage:
  python smoke_api.py [base_url]
"""
import sys

import httpx

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

CHECKS = [
    ("health", "/api/v1/health", {}),
    ("popular listing", "/api/v1/videos", {"page": 1, "limit": 5, "sortBy": "popular"}),
    ("recent search", "/api/v1/videos", {"page": 1, "limit": 5, "sortBy": "recent", "q": "go", "type": "video"}),
    ("autocomplete", "/api/v1/videos/autocomplete", {"q": "go"}),
]


def main() -> int:
    failures = 0
    with httpx.Client(base_url=BASE_URL, timeout=10.0) as client:
        for name, path, params in CHECKS:
            try:
                response = client.get(path, params=params)
            except httpx.HTTPError as e:
                print(f"FAIL {name}: connection error: {e}")
                failures += 1
                continue
            if response.status_code != 200:
                print(f"FAIL {name}: {response.status_code} - {response.text}")
                failures += 1
                continue
            data = response.json()
            if isinstance(data, dict) and "videos" in data:
                print(f"ok   {name}: {len(data['videos'])} of {data['total']} (has_more={data['has_more']})")
            elif isinstance(data, list):
                print(f"ok   {name}: {len(data)} items")
            else:
                print(f"ok   {name}: {data}")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
