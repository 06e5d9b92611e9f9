"""CLI script to add, remove, or show Entra ID group members in bulk.

Identifiers can be passed with --ids, read from a CSV file with --csv
(column EmailAddress for users, DeviceName for devices), or typed at a
prompt. Users are matched by object ID, UPN, email, or SamAccountName;
devices by object ID or name.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from fleetadmin.core.config import load_group_aliases, resolve_group_reference
from fleetadmin.directory.graph import GraphDirectoryClient
from fleetadmin.directory.models import DirectoryGroup, PrincipalKind
from fleetadmin.membership.batch_input import (
    BatchInputError,
    parse_identifiers,
    read_identifiers_csv,
)
from fleetadmin.membership.reconciler import Operation, Reconciler
from fleetadmin.membership.report import report
from fleetadmin.membership.search import filter_members

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

# Silence verbose HTTP request logging
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("azure.identity").setLevel(logging.WARNING)
logging.getLogger("azure.core.pipeline.policies.http_logging_policy").setLevel(logging.WARNING)


def collect_identifiers(
    kind: PrincipalKind,
    csv_path: Path | None = None,
    ids: list[str] | None = None,
) -> list[str]:
    """Collect the batch of identifiers from CSV, arguments, or a prompt.

    Args:
        kind: Kind of principal, selects the CSV column and prompt text
        csv_path: CSV file to read
        ids: Identifiers given on the command line

    Returns:
        Identifiers in input order

    Raises:
        BatchInputError: If the batch is empty or the CSV is unusable
    """
    if csv_path:
        return read_identifiers_csv(csv_path, kind.csv_column)

    if ids:
        identifiers = [i.strip() for i in ids if i.strip()]
    else:
        prompt = f"Enter {kind.csv_column} values separated by spaces: "
        try:
            text = input(prompt)
        except EOFError:
            # stdin closed or redirected from an empty file
            text = ""
        identifiers = parse_identifiers(text)

    if not identifiers:
        raise BatchInputError("No identifiers given")
    return identifiers


async def resolve_group(client: GraphDirectoryClient, group_ref: str) -> DirectoryGroup | None:
    """Resolve a group alias, object ID, or display name.

    Args:
        client: Directory client
        group_ref: Reference typed by the user

    Returns:
        DirectoryGroup, or None if no group matched
    """
    group_id = resolve_group_reference(group_ref, load_group_aliases())
    if group_id:
        return await client.get_group(group_id)
    return await client.get_group_by_name(group_ref.strip())


async def run_membership(
    operation: Operation,
    group_ref: str,
    kind: PrincipalKind,
    csv_path: Path | None = None,
    ids: list[str] | None = None,
    dry_run: bool = False,
) -> int:
    """Add or remove a batch of users or devices.

    Args:
        operation: ADD or REMOVE
        group_ref: Group alias, object ID, or display name
        kind: Kind of principal in the batch
        csv_path: CSV file to read identifiers from
        ids: Identifiers given on the command line
        dry_run: If True, don't change membership, just show what would be done

    Returns:
        Exit code
    """
    logger.info("=" * 50)
    logger.info(f"Group Members: {operation.value} {kind.label}")
    logger.info("=" * 50)

    if dry_run:
        logger.info("DRY RUN - no membership changes will be made")

    try:
        identifiers = collect_identifiers(kind, csv_path=csv_path, ids=ids)
    except BatchInputError as e:
        logger.error(str(e))
        return 1

    try:
        client = GraphDirectoryClient()
        group = await resolve_group(client, group_ref)
    except Exception as e:
        logger.error(f"Failed to connect to Microsoft Graph: {e}")
        return 1

    if group is None:
        logger.error(f"Group not found: {group_ref}")
        return 1

    logger.info(f"Group: {group.display_name} ({group.id})")
    logger.info(f"Identifiers: {len(identifiers)}")

    reconciler = Reconciler(client, group.id, kind=kind, dry_run=dry_run)
    try:
        result = await reconciler.reconcile(operation, identifiers)
    except Exception as e:
        logger.error(f"Failed to load members of {group.display_name}: {e}")
        return 1

    report(result, group_name=group.display_name)
    return 1 if result.has_failures else 0


async def run_show(group_ref: str, kind: PrincipalKind, term: str | None = None) -> int:
    """Show group members, optionally filtered by a partial match.

    Args:
        group_ref: Group alias, object ID, or display name
        kind: Kind of member to show
        term: Case-insensitive substring to match

    Returns:
        Exit code
    """
    try:
        client = GraphDirectoryClient()
        group = await resolve_group(client, group_ref)
        if group is None:
            logger.error(f"Group not found: {group_ref}")
            return 1
        members = await client.list_members(group.id, kind)
    except Exception as e:
        logger.error(f"Failed to read group members: {e}")
        return 1

    matches = filter_members(members, term)

    logger.info("=" * 50)
    logger.info(f"{group.display_name}: {len(matches)} of {len(members)} {kind.label}")
    logger.info("=" * 50)
    for principal in matches:
        logger.info(f"  {principal.describe()}")

    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Add, remove, or show members of an Entra ID group",
    )
    parser.add_argument(
        "command",
        choices=["add", "remove", "show"],
        help="Operation to perform",
    )
    parser.add_argument(
        "--group",
        required=True,
        help="Group alias (config/groups.json), object ID, or display name",
    )
    parser.add_argument(
        "--devices",
        action="store_true",
        help="Manage device members instead of users",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--csv",
        type=Path,
        help="CSV file with an EmailAddress (users) or DeviceName (devices) column",
    )
    source.add_argument(
        "--ids",
        nargs="+",
        metavar="ID",
        help="Identifiers to add or remove (UPN, email, SamAccountName, device name, or ID)",
    )
    parser.add_argument(
        "--filter",
        metavar="TERM",
        help="Only show members matching this text (show only)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without making changes",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    kind = PrincipalKind.DEVICE if args.devices else PrincipalKind.USER

    if args.command == "show":
        if args.csv or args.ids:
            parser.error("--csv and --ids are not used with show")
        exit_code = asyncio.run(run_show(args.group, kind, term=args.filter))
    else:
        if args.filter:
            parser.error("--filter is only used with show")
        exit_code = asyncio.run(
            run_membership(
                operation=Operation(args.command),
                group_ref=args.group,
                kind=kind,
                csv_path=args.csv,
                ids=args.ids,
                dry_run=args.dry_run,
            )
        )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
