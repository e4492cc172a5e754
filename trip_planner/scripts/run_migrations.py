#!/usr/bin/env python
"""
scripts/run_migrations.py
--------------------------
Creates the `documents` table and its indexes from db/schema.sql.

    python -m trip_planner.scripts.run_migrations            # apply
    python -m trip_planner.scripts.run_migrations --dry-run  # list statements only

Exits 1 on any database error; the whole schema is applied in one transaction.
The DDL is idempotent, so applying it twice is harmless.
"""

from __future__ import annotations

import argparse
import logging
import sys
from importlib import resources

import psycopg2

from trip_planner import config
from trip_planner.db.connection import connect_kwargs
from trip_planner.modules.observability.logger import configure_logging

logger = logging.getLogger("trip_planner.migrations")


def load_statements() -> list[str]:
    """schema.sql split into executable statements, line comments removed."""
    text = resources.files("trip_planner.db").joinpath("schema.sql").read_text(encoding="utf-8")
    body = "\n".join(line.split("--", 1)[0] for line in text.splitlines())
    return [chunk.strip() for chunk in body.split(";") if chunk.strip()]


def apply(statements: list[str]) -> None:
    conn = psycopg2.connect(**connect_kwargs())
    try:
        # `with conn` commits on success and rolls back on error
        with conn, conn.cursor() as cur:
            for n, stmt in enumerate(statements, 1):
                logger.info("[%d/%d] %s", n, len(statements), " ".join(stmt.split())[:70])
                cur.execute(stmt)
    finally:
        conn.close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Apply the trip planner document-store schema.")
    parser.add_argument("--dry-run", action="store_true", help="print the statements and exit")
    args = parser.parse_args(argv)

    configure_logging()
    statements = load_statements()

    if args.dry_run:
        for stmt in statements:
            print(stmt + ";\n")
        return

    logger.info("Applying %d statements to %s@%s:%s",
                len(statements), config.POSTGRES_DB, config.POSTGRES_HOST, config.POSTGRES_PORT)
    try:
        apply(statements)
    except psycopg2.Error as exc:
        logger.error("Migration rolled back: %s", exc.pgerror or exc)
        sys.exit(1)
    logger.info("Schema up to date")


if __name__ == "__main__":
    main()
