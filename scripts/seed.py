#!/usr/bin/env python3
"""Load employees from a JSON file into the configured store.

Run from the repository root:

    python3 scripts/seed.py [--file employees.json] [--dry-run] [--verbose]

The file holds a JSON array of employee objects (name, title, timezone and
optionally id, manager_id, display_order, profile_image_url). Entries may
reference a manager declared earlier in the file by its id. Existing
employees are deleted first, so the store ends up holding exactly the file.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from pydantic import TypeAdapter  # noqa: E402

from orgchart.core.config import Settings  # noqa: E402
from orgchart.core.exceptions import HierarchyError  # noqa: E402
from orgchart.core.hierarchy import build_forest, dangling_references  # noqa: E402
from orgchart.models.employee import EmployeeCreate  # noqa: E402
from orgchart.services.employee_repository import InMemoryEmployeeRepository  # noqa: E402
from orgchart.services.employee_service import EmployeeService  # noqa: E402

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[EmployeeCreate])


def load_records(path: Path) -> list[EmployeeCreate]:
    raw: Any = json.loads(path.read_text(encoding="utf-8"))
    return _RECORDS.validate_python(raw)


def summarize(records: list[EmployeeCreate]) -> dict[str, int]:
    employees = [r.to_employee() for r in records]
    forest = build_forest(employees)
    return {
        "employees": len(employees),
        "roots": len(forest.root_ids),
        "unreachable": len(forest.orphans),
        "dangling_references": len(dangling_references(employees)),
    }


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Replace all employees with the contents of a JSON seed file",
    )
    parser.add_argument(
        "--file",
        default=None,
        help="Path to the seed file (default: SEED_FILE setting, employees.json)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate the file and print statistics without touching the store",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return parser.parse_args(argv)


async def seed(args: argparse.Namespace, service: EmployeeService | None = None) -> int:
    settings = Settings()
    level = logging.DEBUG if args.verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

    path = Path(args.file or settings.SEED_FILE)
    if not path.exists():
        logger.error("Seed file not found: %s", path)
        return 1

    records = load_records(path)
    logger.info("Loaded %d employees from %s", len(records), path)
    try:
        await EmployeeService(InMemoryEmployeeRepository()).create_bulk(records)
    except HierarchyError as e:
        logger.error("Seed file rejected: %s", e)
        return 1

    for key, value in summarize(records).items():
        logger.info("  %s: %d", key, value)

    if args.dry_run:
        logger.info("[DRY RUN] Store left untouched.")
        return 0

    service = service or EmployeeService()
    await service.initialize(settings)
    try:
        await service.clear()
        created = await service.create_bulk(records)
        roots = await service.get_roots()
    finally:
        await service.close()

    logger.info("=" * 50)
    logger.info("Seed complete!")
    logger.info("Total employees: %d", len(created))
    logger.info("Root employees: %d", len(roots))
    return 0


def main() -> None:
    args = parse_args()
    sys.exit(asyncio.run(seed(args)))


if __name__ == "__main__":
    main()
