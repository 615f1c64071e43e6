"""Import a CSV file from the command line.

Runs the same validation and all-or-nothing import as the HTTP endpoint.

Usage:
    impactcrm-import FILE --type client_files --org ORG_ID [--user USER_ID]
                     [--year 2024] [--dry-run] [--max-errors 50]

Exit status: 0 imported (or nothing to import), 1 blocked, 2 store failure.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from impactcrm.config import settings
from impactcrm.database import close_db, init_db
from impactcrm.exceptions import RecordStoreError
from impactcrm.logging_setup import configure_logging
from impactcrm.models.organization import MemberRole
from impactcrm.services.import_service import (
    RECORD_SCHEMAS,
    ImportOutcome,
    ImportStatus,
    get_schema,
    import_csv,
)
from impactcrm.services.record_store import InMemoryRecordStore, MongoRecordStore
from impactcrm.services.tenancy import TenantContext

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BLOCKED = 1
EXIT_STORE_FAILURE = 2


def print_outcome(outcome: ImportOutcome, max_errors: int, dry_run: bool = False) -> None:
    """Print a human-readable summary of an import."""
    if outcome.status is ImportStatus.ACCEPTED:
        verb = "Would import" if dry_run else "Imported"
        print(f"{verb} {outcome.inserted} {outcome.record_type} records")
        if outcome.year is not None:
            print(f"  Year: {outcome.year}")
        return

    if outcome.status is ImportStatus.EMPTY:
        print("No data rows found; nothing was imported")
        return

    print(f"Import blocked by {outcome.error_count} error(s); nothing was imported")
    shown, hidden = outcome.display_errors(max_errors)
    for message in shown:
        print(f"  {message}")
    if hidden:
        print(f"  ...and {hidden} more")


async def run_import(
    path: Path,
    record_type: str,
    organization_id: str,
    user_id: str | None = None,
    year: int | None = None,
    dry_run: bool = False,
    max_errors: int | None = None,
) -> int:
    """Import one file and return the process exit status."""
    schema = get_schema(record_type)
    tenant = TenantContext(organization_id=organization_id, user_id=user_id, role=MemberRole.ADMIN)

    if dry_run:
        store = InMemoryRecordStore()
    else:
        await init_db()
        store = MongoRecordStore()

    try:
        outcome = await import_csv(
            path.read_bytes(),
            schema,
            tenant,
            store,
            year_override=year,
            filename=path.name,
            max_rows=settings.import_max_rows,
        )
    except RecordStoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_STORE_FAILURE
    finally:
        if not dry_run:
            await close_db()

    print_outcome(outcome, max_errors or settings.import_max_displayed_errors, dry_run)
    return EXIT_BLOCKED if outcome.status is ImportStatus.BLOCKED else EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate and import a CSV file for an organization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("file", type=Path, help="CSV file to import")
    parser.add_argument(
        "--type", "-t",
        dest="record_type",
        required=True,
        choices=sorted(RECORD_SCHEMAS),
        help="Record type of the file",
    )
    parser.add_argument("--org", "-o", required=True, help="Organization id to import into")
    parser.add_argument("--user", "-u", default=None, help="User id recorded as creator")
    parser.add_argument("--year", "-y", type=int, default=None, help="Reporting year override")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate only; nothing is written to the database",
    )
    parser.add_argument(
        "--max-errors",
        type=int,
        default=None,
        help="Maximum number of errors to print",
    )
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.file.is_file():
        parser.error(f"file not found: {args.file}")

    configure_logging(args.log_level)

    try:
        return asyncio.run(
            run_import(
                args.file,
                args.record_type,
                args.org,
                user_id=args.user,
                year=args.year,
                dry_run=args.dry_run,
                max_errors=args.max_errors,
            )
        )
    except KeyboardInterrupt:
        print("\nAborted.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
