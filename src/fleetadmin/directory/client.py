"""Directory client interface consumed by the membership reconciler."""

from typing import Protocol

from fleetadmin.directory.models import MutationResult, Principal, PrincipalKind


class DirectoryClient(Protocol):
    """Operations the reconciler needs from a directory service.

    Implementations may raise from any method; the reconciler converts
    raised errors into failed outcomes for the identifier being processed.
    """

    async def resolve_principal(self, identifier: str, kind: PrincipalKind) -> Principal | None:
        """Resolve an identifier (object ID, UPN, email, name) to a principal."""
        ...

    async def list_members(self, group_id: str, kind: PrincipalKind) -> list[Principal]:
        """List the current members of a group, restricted to one kind."""
        ...

    async def add_member(self, group_id: str, principal_id: str) -> MutationResult:
        """Add a principal to a group."""
        ...

    async def remove_member(self, group_id: str, principal_id: str) -> MutationResult:
        """Remove a principal from a group."""
        ...
