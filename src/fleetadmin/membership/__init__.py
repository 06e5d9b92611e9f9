"""Group membership reconciliation."""

from fleetadmin.membership.batch_input import (
    BatchInputError,
    parse_identifiers,
    read_identifiers_csv,
)
from fleetadmin.membership.index import MembershipIndex
from fleetadmin.membership.reconciler import (
    Operation,
    OutcomeStatus,
    ReconcileOutcome,
    Reconciler,
    ReconcileResult,
    ReconcileSummary,
)

__all__ = [
    "BatchInputError",
    "MembershipIndex",
    "Operation",
    "OutcomeStatus",
    "ReconcileOutcome",
    "ReconcileResult",
    "ReconcileSummary",
    "Reconciler",
    "parse_identifiers",
    "read_identifiers_csv",
]
