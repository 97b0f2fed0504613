#!/usr/bin/env python
"""Dispatch one request to a running router and poll until it settles."""
from __future__ import annotations

import argparse
import json
import os
import sys
import time

import httpx

TERMINAL_STATUSES = {"complete", "oracle_error", "internal_error", "unknown_command", "workflow_error"}


def main() -> int:
    parser = argparse.ArgumentParser(description="Dispatch to a slot/agent and poll its execution status")
    parser.add_argument("--base-url", default="http://localhost:8080", help="Router base URL")
    parser.add_argument("--key", default=os.getenv("GOVERNOR_KEY", "dev-governor-key"), help="X-GOVERNOR-KEY value")
    parser.add_argument("--slot", type=int, default=9, help="Project slot (1-9)")
    parser.add_argument("--agent", default="commander-agent", help="Agent id inside the slot")
    parser.add_argument("--payload", default='{"command": "boot"}', help="JSON payload")
    parser.add_argument("--attempts", type=int, default=10, help="Number of status polls")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between polls")
    args = parser.parse_args()

    headers = {"X-GOVERNOR-KEY": args.key}
    with httpx.Client(base_url=args.base_url, headers=headers, timeout=30.0) as client:
        response = client.post(
            "/v1/route",
            json={
                "project_slot": args.slot,
                "agent_id": args.agent,
                "mode": "async",
                "payload": json.loads(args.payload),
            },
        )
        if response.status_code != 200:
            print(f"Dispatch failed ({response.status_code}): {response.text}", file=sys.stderr)
            return 1

        execution_id = response.json()["execution_id"]
        print(f"Dispatched: {execution_id}")

        for _ in range(args.attempts):
            time.sleep(args.interval)
            status = client.get(f"/v1/status/{execution_id}").json()
            print(f"  status: {status.get('status')} progress: {status.get('progress')}")
            if status.get("status") == "complete":
                print(json.dumps(status, indent=2))
                return 0
            if status.get("status") in TERMINAL_STATUSES:
                print(json.dumps(status, indent=2), file=sys.stderr)
                return 1

    print("Timed out waiting for completion", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
