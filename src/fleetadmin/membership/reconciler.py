"""Bulk add/remove of group members with per-identifier outcomes.

For each identifier the reconciler resolves a principal, checks the
membership index, issues at most one mutating call, and records exactly
one outcome. A failure on one identifier never stops the batch; there
are no retries and no rollback, so re-running the same batch is the
recovery path (adds of existing members and removes of non-members are
no-ops).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from fleetadmin.directory.client import DirectoryClient
from fleetadmin.directory.models import MutationResult, Principal, PrincipalKind
from fleetadmin.membership.index import MembershipIndex

logger = logging.getLogger(__name__)


class Operation(Enum):
    """Bulk membership operations."""

    ADD = "add"
    REMOVE = "remove"


class OutcomeStatus(Enum):
    """Terminal state of one identifier in a batch."""

    ADDED = "added"
    ALREADY_MEMBER = "already_member"
    REMOVED = "removed"
    NOT_MEMBER = "not_member"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class ReconcileOutcome:
    """Result for a single requested identifier."""

    identifier: str
    status: OutcomeStatus
    resolved: Principal | None = None
    error_detail: str | None = None


@dataclass
class ReconcileSummary:
    """Counts of outcomes per status over one run."""

    operation: Operation
    added: int = 0
    already_member: int = 0
    removed: int = 0
    not_member: int = 0
    not_found: int = 0
    failed: int = 0

    @classmethod
    def from_outcomes(
        cls, operation: Operation, outcomes: list[ReconcileOutcome]
    ) -> "ReconcileSummary":
        """Tally a list of outcomes."""
        summary = cls(operation=operation)
        for outcome in outcomes:
            name = outcome.status.value
            setattr(summary, name, getattr(summary, name) + 1)
        return summary

    @property
    def total(self) -> int:
        """Total identifiers processed."""
        return (
            self.added
            + self.already_member
            + self.removed
            + self.not_member
            + self.not_found
            + self.failed
        )

    @property
    def changed(self) -> int:
        """Count of identifiers whose membership was changed."""
        return self.added + self.removed


@dataclass
class ReconcileResult:
    """Ordered outcomes and summary of one reconciler run."""

    operation: Operation
    group_id: str
    kind: PrincipalKind
    outcomes: list[ReconcileOutcome] = field(default_factory=list)
    dry_run: bool = False

    @property
    def summary(self) -> ReconcileSummary:
        """Counts per status bucket."""
        return ReconcileSummary.from_outcomes(self.operation, self.outcomes)

    @property
    def has_failures(self) -> bool:
        """Check if any identifier failed."""
        return any(o.status is OutcomeStatus.FAILED for o in self.outcomes)


class Reconciler:
    """Apply a bulk add or remove to one group."""

    def __init__(
        self,
        client: DirectoryClient,
        group_id: str,
        kind: PrincipalKind = PrincipalKind.USER,
        dry_run: bool = False,
    ) -> None:
        """Initialize the reconciler.

        Args:
            client: Directory client used for resolution and mutation
            group_id: Target group ID
            kind: Kind of principal the identifiers refer to
            dry_run: If True, report what would change without mutating
        """
        self.client = client
        self.group_id = group_id
        self.kind = kind
        self.dry_run = dry_run

    async def reconcile(
        self,
        operation: Operation,
        identifiers: list[str],
        index: MembershipIndex | None = None,
    ) -> ReconcileResult:
        """Run a bulk operation over a list of identifiers.

        Args:
            operation: ADD or REMOVE
            identifiers: Non-empty identifiers (UPN, email, name, object ID)
            index: Existing membership index to reuse; built from one
                member listing if omitted

        Returns:
            ReconcileResult with one outcome per identifier, in input order

        Raises:
            ValueError: If the batch is empty or contains a blank identifier
        """
        if not identifiers:
            raise ValueError("No identifiers to process")
        if any(not identifier or not identifier.strip() for identifier in identifiers):
            raise ValueError("Identifiers must be non-empty strings")

        if index is None:
            index = await MembershipIndex.build(self.client, self.group_id, self.kind)

        logger.info(
            f"{operation.value.title()} {len(identifiers)} {self.kind.label} "
            f"({'dry run' if self.dry_run else 'live'}) for group {self.group_id}"
        )

        result = ReconcileResult(
            operation=operation,
            group_id=self.group_id,
            kind=self.kind,
            dry_run=self.dry_run,
        )
        for identifier in identifiers:
            result.outcomes.append(await self._process(operation, identifier, index))

        return result

    async def add(
        self, identifiers: list[str], index: MembershipIndex | None = None
    ) -> ReconcileResult:
        """Add identifiers to the group."""
        return await self.reconcile(Operation.ADD, identifiers, index)

    async def remove(
        self, identifiers: list[str], index: MembershipIndex | None = None
    ) -> ReconcileResult:
        """Remove identifiers from the group."""
        return await self.reconcile(Operation.REMOVE, identifiers, index)

    async def _process(
        self,
        operation: Operation,
        identifier: str,
        index: MembershipIndex,
    ) -> ReconcileOutcome:
        """Drive one identifier to a terminal outcome."""
        try:
            principal = await self.client.resolve_principal(identifier.strip(), self.kind)
        except Exception as e:
            logger.debug(f"Resolution of {identifier} raised: {e}")
            return ReconcileOutcome(identifier, OutcomeStatus.FAILED, error_detail=str(e))

        if principal is None:
            return ReconcileOutcome(identifier, OutcomeStatus.NOT_FOUND)

        key = principal.lookup_key
        is_member = key is not None and index.contains(key)

        if operation is Operation.ADD:
            if is_member:
                return ReconcileOutcome(identifier, OutcomeStatus.ALREADY_MEMBER, principal)
            mutation = self._mutate(self.client.add_member, principal)
            success_status = OutcomeStatus.ADDED
        else:
            if not is_member:
                return ReconcileOutcome(identifier, OutcomeStatus.NOT_MEMBER, principal)
            mutation = self._mutate(self.client.remove_member, principal)
            success_status = OutcomeStatus.REMOVED

        try:
            outcome = await mutation
        except Exception as e:
            outcome = MutationResult.failure(str(e))

        if not outcome.ok:
            return ReconcileOutcome(
                identifier,
                OutcomeStatus.FAILED,
                principal,
                error_detail=outcome.error or "Unknown error",
            )

        if key is not None:
            if operation is Operation.ADD:
                index.record(key, principal.id)
            else:
                index.forget(key)

        return ReconcileOutcome(identifier, success_status, principal)

    async def _mutate(self, call, principal: Principal) -> MutationResult:
        if self.dry_run:
            return MutationResult.success()
        return await call(self.group_id, principal.id)
