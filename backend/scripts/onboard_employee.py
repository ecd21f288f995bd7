#!/usr/bin/env python3
"""Drive the new-employee flow against a running onboarding API.

Run from the backend/ directory:

    python3 scripts/onboard_employee.py --title "Jane Doe" --start-date 2025-01-15 \
        --role-code CRD [--base-url http://localhost:8000] [--token TOKEN] [--dry-run]

Creates the employee profile, releases the orientation items and reads the
tracker back, printing how many items came back and their statuses.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from collections import Counter
from typing import Any

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import aiohttp  # noqa: E402

from onboarding.services.employees import build_create_payload, created_id  # noqa: E402

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create an employee, release orientation and read the tracker back",
    )
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000",
        help="Onboarding API base URL (default: http://localhost:8000)",
    )
    parser.add_argument("--title", required=True, help="Employee display name")
    parser.add_argument("--start-date", required=True, help="Start date, YYYY-MM-DD")
    parser.add_argument("--role-code", default="", help="Role code, e.g. CRD")
    parser.add_argument("--role-lookup-id", default="", help="Role lookup id (alternative to --role-code)")
    parser.add_argument("--email", default="", help="Employee email")
    parser.add_argument("--token", default=os.environ.get("ONBOARDING_TOKEN", ""), help="Bearer token")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and print the create payload without calling the API",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return parser.parse_args(argv)


def request_body(args: argparse.Namespace) -> dict[str, Any]:
    body: dict[str, Any] = {"title": args.title, "startDate": args.start_date}
    if args.role_code:
        body["roleCode"] = args.role_code
    if args.role_lookup_id:
        body["roleLookupId"] = args.role_lookup_id
    if args.email:
        body["employeeEmail"] = args.email
    return body


async def _call(session: aiohttp.ClientSession, method: str, url: str, **kwargs: Any) -> Any:
    async with session.request(method, url, **kwargs) as response:
        text = await response.text()
        if response.status >= 400:
            raise RuntimeError(f"{method} {url} failed ({response.status}): {text[:500]}")
        return json.loads(text) if text.strip() else {}


async def onboard(args: argparse.Namespace) -> int:
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

    body = request_body(args)
    payload = build_create_payload(body)
    if args.dry_run:
        print(json.dumps(payload, indent=2))
        return 0

    base = args.base_url.rstrip("/")
    headers = {"Authorization": f"Bearer {args.token}"} if args.token else {}
    timeout = aiohttp.ClientTimeout(total=60)
    async with aiohttp.ClientSession(timeout=timeout, headers=headers) as session:
        logger.info("Creating employee %r...", args.title)
        created = await _call(session, "POST", f"{base}/api/employees", json=body)
        employee_id = created_id(created)
        if not employee_id:
            logger.error("Create returned no id: %s", created)
            return 1

        logger.info("Releasing orientation for %s...", employee_id)
        await _call(session, "POST", f"{base}/api/orientation-tracker/release/{employee_id}")

        tracker = await _call(session, "GET", f"{base}/api/orientation-tracker/{employee_id}")

    items = tracker.get("items") or []
    statuses = Counter(str((item.get("fields") or item).get("Status", "?")) for item in items)
    logger.info("Employee %s has %d orientation item(s): %s", employee_id, len(items), dict(statuses))
    return 0 if items else 1


def main() -> None:
    args = parse_args()
    sys.exit(asyncio.run(onboard(args)))


if __name__ == "__main__":
    main()
