"""Console reporting for reconciler runs."""

import logging

from fleetadmin.membership.reconciler import (
    Operation,
    OutcomeStatus,
    ReconcileOutcome,
    ReconcileResult,
    ReconcileSummary,
)

logger = logging.getLogger(__name__)

STATUS_TAGS = {
    OutcomeStatus.ADDED: "ADDED",
    OutcomeStatus.ALREADY_MEMBER: "ALREADY",
    OutcomeStatus.REMOVED: "REMOVED",
    OutcomeStatus.NOT_MEMBER: "NOT MEMBER",
    OutcomeStatus.NOT_FOUND: "NOT FOUND",
    OutcomeStatus.FAILED: "FAILED",
}

DRY_RUN_TAGS = {
    OutcomeStatus.ADDED: "WOULD ADD",
    OutcomeStatus.REMOVED: "WOULD REMOVE",
}


def format_outcome(outcome: ReconcileOutcome, dry_run: bool = False) -> str:
    """Format one outcome as a status line.

    Args:
        outcome: The outcome to format
        dry_run: Tag adds and removes as intended rather than done

    Returns:
        Line like "[ADDED] a@x.com - Alice | a@x.com"
    """
    tag = STATUS_TAGS[outcome.status]
    if dry_run:
        tag = DRY_RUN_TAGS.get(outcome.status, tag)

    line = f"[{tag}] {outcome.identifier}"
    if outcome.resolved:
        line += f" - {outcome.resolved.describe()}"
    if outcome.error_detail:
        line += f": {outcome.error_detail}"
    return line


def summary_line(summary: ReconcileSummary) -> str:
    """Format the final tally.

    Add runs read "Added: n Already: n Failed: n"; remove runs read
    "Removed: n Not mem: n Failed: n". Unresolved identifiers are
    appended as "Not found: n" when there are any.
    """
    if summary.operation is Operation.ADD:
        line = f"Added: {summary.added} Already: {summary.already_member} Failed: {summary.failed}"
    else:
        line = (
            f"Removed: {summary.removed} Not mem: {summary.not_member} Failed: {summary.failed}"
        )
    if summary.not_found:
        line += f" Not found: {summary.not_found}"
    return line


def report(result: ReconcileResult, group_name: str | None = None) -> ReconcileSummary:
    """Log every outcome and the summary of a run.

    Args:
        result: The reconciler result
        group_name: Display name of the group for the banner

    Returns:
        The summary that was reported
    """
    logger.info("")
    logger.info("=" * 50)
    title = f"{result.operation.value.title()} {result.kind.label}"
    if group_name:
        title += f" - {group_name}"
    if result.dry_run:
        title += " (DRY RUN)"
    logger.info(title)
    logger.info("=" * 50)

    for outcome in result.outcomes:
        line = format_outcome(outcome, dry_run=result.dry_run)
        if outcome.status is OutcomeStatus.FAILED:
            logger.error(line)
        elif outcome.status is OutcomeStatus.NOT_FOUND:
            logger.warning(line)
        else:
            logger.info(line)

    summary = result.summary
    logger.info("")
    logger.info(summary_line(summary))
    return summary
