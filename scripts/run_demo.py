#!/usr/bin/env python3
"""run_demo.py — Generate the same cover letter twice against the live API.

The first call should be a cache miss (fresh generation), the second a
cache hit returning the identical letter.

Usage:
    python scripts/run_demo.py              # default: http://localhost:8000
    python scripts/run_demo.py --base-url http://localhost:8000
    python scripts/run_demo.py --request-type outreachMessage
"""

from __future__ import annotations

import argparse
import sys

import httpx

DEMO_PAYLOAD = {
    "developerProfile": {
        "id": "demo-dev-1",
        "name": "Jane Smith",
        "email": "jane.smith@example.com",
        "title": "Backend Engineer",
        "contactInfo": {"phone": "+44 20 7946 0000", "github": "https://github.com/janesmith"},
        "skills": [
            {"name": "Python", "category": "language", "level": "expert"},
            {"name": "FastAPI", "category": "framework", "level": "advanced"},
            {"name": "PostgreSQL", "category": "database", "level": "advanced"},
        ],
        "achievements": [
            {"title": "Latency", "description": "Cut p95 API latency by 45% across 12 services"},
        ],
    },
    "roleInfo": {
        "title": "Senior Backend Engineer",
        "description": "Own our Python APIs and data pipelines.",
        "requirements": ["5+ years Python", "Distributed systems"],
        "skills": ["Python", "Kafka", "PostgreSQL"],
    },
    "companyInfo": {
        "name": "Acme Analytics",
        "industry": "Data",
        "attractionPoints": ["Processes 2B events per day"],
    },
    "jobSourceInfo": {"source": "LinkedIn"},
}


def _post(base_url: str, payload: dict) -> dict:
    resp = httpx.post(f"{base_url}/generate-cover-letter", json=payload, timeout=60)
    data = resp.json()
    if resp.status_code != 200:
        raise RuntimeError(f"{resp.status_code} {data.get('code')}: {data.get('error')}")
    return data


def run_demo(base_url: str, request_type: str) -> None:
    print("═" * 60)
    print(" Cover Letter Service — Demo")
    print("═" * 60)
    print(f"Target: {base_url}\n")

    try:
        resp = httpx.get(f"{base_url}/health", timeout=5)
        resp.raise_for_status()
        print(f"✅ Health check: {resp.json()}\n")
    except Exception as exc:
        print(f"❌ Health check failed: {exc}")
        print("   Make sure the server is running: uvicorn app.main:app --reload")
        sys.exit(1)

    payload = {**DEMO_PAYLOAD, "requestType": request_type}
    letters = []
    for attempt in (1, 2):
        print(f"─── Attempt {attempt} {'─' * 40}")
        try:
            data = _post(base_url, payload)
        except Exception as exc:
            print(f"  ❌ Error: {exc}")
            sys.exit(1)
        letters.append(data["letter"])
        print(f"  → Provider: {data['provider']}")
        print(f"  → Cached:   {data['cached']}")
        print(f"  → Words:    {len(data['letter'].split())}")
        print(f"  → Letter:   {data['letter'][:160]}...")
        print()

    print("═" * 60)
    same = letters[0] == letters[1]
    print(f" Second response identical to first: {'yes' if same else 'no'}")
    print("═" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the cover letter demo")
    parser.add_argument("--base-url", default="http://localhost:8000", help="API base URL")
    parser.add_argument(
        "--request-type",
        default="coverLetter",
        choices=["coverLetter", "outreachMessage"],
        help="Kind of letter to generate",
    )
    args = parser.parse_args()
    run_demo(args.base_url, args.request_type)
