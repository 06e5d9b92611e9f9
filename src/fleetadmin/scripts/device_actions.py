"""CLI script to send Intune remote actions (sync, reboot) to devices."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from fleetadmin.devices.actions import (
    ActionResult,
    ActionStatus,
    DeviceAction,
    ManagedDeviceManager,
)
from fleetadmin.membership.batch_input import BatchInputError, read_identifiers_csv

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("azure.identity").setLevel(logging.WARNING)
logging.getLogger("azure.core.pipeline.policies.http_logging_policy").setLevel(logging.WARNING)

CSV_COLUMN = "DeviceName"


def report_actions(result: ActionResult) -> None:
    """Log one line per outcome and the final tally."""
    logger.info("")
    logger.info("=" * 50)
    logger.info("Results")
    logger.info("=" * 50)

    for outcome in result.outcomes:
        tag = {
            ActionStatus.SENT: "WOULD SEND" if result.dry_run else "SENT",
            ActionStatus.NOT_FOUND: "NOT FOUND",
            ActionStatus.FAILED: "FAILED",
        }[outcome.status]
        line = f"[{tag}] {outcome.device_name}"
        if outcome.device:
            line += f" - {outcome.device.describe()}"
        if outcome.error_detail:
            line += f": {outcome.error_detail}"

        if outcome.status is ActionStatus.FAILED:
            logger.error(line)
        elif outcome.status is ActionStatus.NOT_FOUND:
            logger.warning(line)
        else:
            logger.info(line)

    summary = result.summary
    logger.info("")
    logger.info(f"Sent: {summary.sent} Not found: {summary.not_found} Failed: {summary.failed}")


async def run_action(
    action: DeviceAction,
    csv_path: Path | None = None,
    device_names: list[str] | None = None,
    dry_run: bool = False,
) -> int:
    """Send a remote action to a batch of devices.

    Args:
        action: Action to send
        csv_path: CSV file with a DeviceName column
        device_names: Device names given on the command line
        dry_run: If True, look devices up but send nothing

    Returns:
        Exit code
    """
    logger.info("=" * 50)
    logger.info(f"Device Action: {action.value}")
    logger.info("=" * 50)

    if dry_run:
        logger.info("DRY RUN - no actions will be sent")

    try:
        if csv_path:
            names = read_identifiers_csv(csv_path, CSV_COLUMN)
        else:
            names = [n.strip() for n in device_names or [] if n.strip()]
        if not names:
            raise BatchInputError("No device names given")
    except BatchInputError as e:
        logger.error(str(e))
        return 1

    try:
        manager = ManagedDeviceManager()
    except Exception as e:
        logger.error(f"Failed to connect to Microsoft Graph: {e}")
        return 1

    result = await manager.dispatch(action, names, dry_run=dry_run)
    report_actions(result)
    return 1 if result.has_failures else 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Send a remote action to Intune managed devices",
    )
    parser.add_argument(
        "action",
        choices=[a.value for a in DeviceAction],
        help="Action to send",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--csv",
        type=Path,
        help=f"CSV file with a {CSV_COLUMN} column",
    )
    source.add_argument(
        "--devices",
        nargs="+",
        metavar="NAME",
        help="Device names",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show which devices would be targeted without sending anything",
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

    exit_code = asyncio.run(
        run_action(
            action=DeviceAction(args.action),
            csv_path=args.csv,
            device_names=args.devices,
            dry_run=args.dry_run,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
