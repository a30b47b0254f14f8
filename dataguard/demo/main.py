"""
DataGuard Demo Application

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

This demo walks through the decision procedure:
- Allowed read with a broad grant
- Method / query type mismatch
- Unknown user and incomplete requests
- Table scoping and per-table column allow-lists
- Audit log retrieval
"""

import asyncio
import logging
import sys
from typing import Any, Dict

from dataguard.core.config import Config
from dataguard.core.guard import DataGuard
from dataguard.authz.directory import RoleDirectory


DEMO_DIRECTORY: Dict[str, Any] = {
    "users": {
        "alice": {"roles": ["reader"]},
        "carol": {"roles": ["orders-analyst"]},
    },
    "roles": {
        "reader": {
            "grants": [{"actions": ["SELECT"], "resources": {}}]
        },
        "orders-analyst": {
            "grants": [{
                "actions": ["SELECT"],
                "resources": {
                    "data_source": "aurora",
                    "instances": ["inst-*"],
                    "tables": ["orders"],
                    "columns_by_table": [
                        {"table": "inst-a.orders", "columns": ["id", "total"]}
                    ],
                },
            }]
        },
    },
}


def _request(user_id: str, method: str, query_type: str, **query: Any) -> Dict[str, Any]:
    columns = query.pop("columns", None)
    request = {
        "user_id": user_id,
        "request": {"method": method},
        "query": {"query_type": query_type, **query},
    }
    if columns is not None:
        request["columns"] = columns
    return request


SCENARIOS = [
    ("Broad read grant",
     _request("alice", "GET", "SELECT", data_source="aurora", query_sql="select 1")),
    ("POST declared as SELECT",
     _request("alice", "POST", "SELECT", data_source="aurora", query_sql="select 1")),
    ("Unknown user",
     _request("bob", "GET", "SELECT", data_source="aurora", query_sql="select 1")),
    ("Missing data source",
     _request("alice", "GET", "SELECT", query_sql="select 1")),
    ("Table outside the grant",
     _request("carol", "GET", "SELECT", data_source="aurora", instance="inst-a",
              table="customers", query_sql="select * from customers")),
    ("Column outside the per-table allow-list",
     _request("carol", "GET", "SELECT", data_source="aurora", instance="inst-a",
              table="orders", query_sql="select id, ssn from orders", columns=["id", "ssn"])),
    ("Columns inside the per-table allow-list",
     _request("carol", "GET", "SELECT", data_source="aurora", instance="inst-a",
              table="orders", query_sql="select id, total from orders", columns=["id", "total"])),
]


async def main() -> int:
    """Main demo function"""
    print("DataGuard Demo Application")
    print("=" * 50)
    print()

    config = Config(audit_logger="memory", log_level="WARNING")
    logging.basicConfig(level=config.log_level_value)

    try:
        guard = DataGuard.new(config, directory=RoleDirectory.from_dict(DEMO_DIRECTORY))
        print(f"✓ Created DataGuard with {guard.directory!r}")
        print()
    except Exception as e:
        print(f"✗ Error creating DataGuard instance: {e}")
        return 1

    for step, (title, request) in enumerate(SCENARIOS, 1):
        print(f"Step {step}: {title}")
        print("-" * 40)
        result = await guard.evaluate(request)
        print(f"  - Decision: {result.decision.value}")
        print(f"  - Message: {result.message}")
        print()

    print("Audit Log Retrieval")
    print("-" * 40)
    events = await guard.audit_logger.get_events()
    print(f"✓ Retrieved {len(events)} audit events")
    for event in events:
        print(f"  - {event.user_id}: {event.decision} on {event.resource} ({event.details['reason']})")
    print()

    await guard.close()
    print("Demo completed successfully!")
    return 0


def run() -> None:
    """Console entry point"""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nDemo interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    run()
