"""
Basic DataGuard usage example.

This example demonstrates the fundamental DataGuard operations:
- Loading a directory snapshot from YAML
- Evaluating requests with the pure decision function
- Running the same requests through the audited service
"""

import asyncio
from pathlib import Path

from dataguard import Config, DataGuard, RoleDirectory, decide


DIRECTORY_FILE = Path(__file__).with_name("directory.yaml")

REQUESTS = [
    {
        "user_id": "alice",
        "request": {"method": "GET"},
        "query": {"query_type": "SELECT", "data_source": "aurora",
                  "table": "orders", "query_sql": "select id from orders"},
        "columns": ["id"],
    },
    {
        "user_id": "alice",
        "request": {"method": "GET"},
        "query": {"query_type": "SELECT", "data_source": "aurora",
                  "table": "customers", "query_sql": "select ssn from customers"},
        "columns": ["ssn"],
    },
    {
        "user_id": "Dana",
        "request": {"method": "POST"},
        "query": {"query_type": "insert", "data_source": "Snowflake", "instance": "WH-EU",
                  "table": "staging_orders", "query_sql": "insert into staging_orders values (1)"},
    },
    {
        "user_id": "dana",
        "request": {"method": "DELETE"},
        "query": {"query_type": "DELETE", "data_source": "dynamodb", "table": "sessions"},
    },
]


def pure_example():
    """Evaluate requests directly against a snapshot"""
    print("Pure decision function")
    print("=" * 30)

    directory = RoleDirectory.from_file(str(DIRECTORY_FILE))
    for request in REQUESTS:
        result = decide(request, directory)
        print(f"{request['user_id']:>6} {request['request']['method']:<6} -> "
              f"{result.decision.value}: {result.message}")
    print()


async def service_example():
    """Evaluate requests through the audited service"""
    print("Audited service")
    print("=" * 30)

    guard = DataGuard.new(Config(directory_path=str(DIRECTORY_FILE)))
    try:
        for request in REQUESTS:
            print(await guard.authorize(request))

        denied = await guard.audit_logger.get_events(decision="Denied")
        print(f"✓ {len(denied)} denied requests recorded")
    finally:
        await guard.close()


if __name__ == "__main__":
    pure_example()
    asyncio.run(service_example())
