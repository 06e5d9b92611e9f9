"""Point-in-time index of a group's current members."""

import logging
from collections.abc import Iterator

from fleetadmin.core.normalize import normalize_key
from fleetadmin.directory.client import DirectoryClient
from fleetadmin.directory.models import Principal, PrincipalKind

logger = logging.getLogger(__name__)


class MembershipIndex:
    """Map of normalized lookup key to directory object ID for one group.

    Seeded from a single member listing. The reconciler updates it after
    each successful add or remove; changes made by anyone else during a
    run are not seen.
    """

    def __init__(self, kind: PrincipalKind, members: dict[str, str] | None = None) -> None:
        """Initialize the index.

        Args:
            kind: Kind of principal this index tracks
            members: Optional initial mapping of lookup key to object ID
        """
        self.kind = kind
        self.skipped = 0
        self._members: dict[str, str] = {}
        for key, principal_id in (members or {}).items():
            self.record(key, principal_id)

    @classmethod
    async def build(
        cls,
        client: DirectoryClient,
        group_id: str,
        kind: PrincipalKind,
    ) -> "MembershipIndex":
        """Build an index from the group's current members.

        Members lacking the lookup attribute (UPN for users, name for
        devices) cannot be matched by identifier and are skipped.

        Args:
            client: Directory client used for the single listing call
            group_id: The group ID
            kind: Kind of member to index

        Returns:
            Populated MembershipIndex
        """
        index = cls(kind)
        members = await client.list_members(group_id, kind)
        for member in members:
            index.add_principal(member)

        if index.skipped:
            logger.warning(
                f"Skipped {index.skipped} {kind.label} in group {group_id} with no lookup key"
            )
        logger.debug(f"Indexed {len(index)} {kind.label} for group {group_id}")
        return index

    def add_principal(self, principal: Principal) -> bool:
        """Index a principal by its lookup key.

        Returns:
            True if indexed, False if the principal has no lookup key
        """
        key = principal.lookup_key
        if key is None:
            self.skipped += 1
            return False
        self._members[key] = principal.id
        return True

    def contains(self, key: str) -> bool:
        """Check if a lookup key is currently a member."""
        normalized = normalize_key(key)
        return normalized is not None and normalized in self._members

    def get(self, key: str) -> str | None:
        """Get the object ID recorded for a lookup key."""
        normalized = normalize_key(key)
        if normalized is None:
            return None
        return self._members.get(normalized)

    def record(self, key: str, principal_id: str) -> None:
        """Record a member after a successful add."""
        normalized = normalize_key(key)
        if normalized is None:
            raise ValueError("Cannot index a member without a lookup key")
        self._members[normalized] = principal_id

    def forget(self, key: str) -> None:
        """Drop a member after a successful remove."""
        normalized = normalize_key(key)
        if normalized is not None:
            self._members.pop(normalized, None)

    def keys(self) -> list[str]:
        """Get all indexed lookup keys, sorted."""
        return sorted(self._members)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains(key)

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())
