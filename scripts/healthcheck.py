"""
Simple health check for the database handle.

Exits 0 when a count query against competitors resolves, 1 otherwise.
Works against both the PostgreSQL backend and the in-memory fallback.
"""

from __future__ import annotations

import asyncio
import json
import logging

from sqlalchemy import func

from db.errors import DatabaseError
from db.models import Competitor
from db.session import get_database


async def _check() -> dict[str, object]:
    database = get_database()
    try:
        rows = await database.select({"count": func.count()}).from_(Competitor).execute()
    finally:
        await database.dispose()
    return {"backend": database.backend_name, "competitors": rows[0]["count"] if rows else 0}


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    try:
        payload = asyncio.run(_check())
    except (DatabaseError, OSError) as exc:
        print(json.dumps({"status": "error", "error": str(exc)}))
        return 1
    print(json.dumps({"status": "ok", **payload}))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
