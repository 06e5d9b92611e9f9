"""Shared pytest fixtures."""

import pytest

from fleetadmin.directory.models import MutationResult, Principal, PrincipalKind

GROUP_ID = "11111111-2222-3333-4444-555555555555"


def make_user(upn: str | None, user_id: str | None = None, **overrides) -> Principal:
    """Build a user principal keyed by UPN."""
    local = (upn or "nobody").split("@")[0]
    defaults = {
        "id": user_id or f"id-{local}",
        "display_name": local.title(),
        "kind": PrincipalKind.USER,
        "upn": upn,
        "mail": upn,
    }
    defaults.update(overrides)
    return Principal(**defaults)


def make_device(name: str | None, device_id: str | None = None, **overrides) -> Principal:
    """Build a device principal keyed by name."""
    defaults = {
        "id": device_id or f"dev-{(name or 'unnamed').lower()}",
        "display_name": name or "",
        "kind": PrincipalKind.DEVICE,
        "device_name": name,
        "trust_type": "AzureAd",
    }
    defaults.update(overrides)
    return Principal(**defaults)


class FakeDirectory:
    """In-memory directory client recording every call."""

    def __init__(self, principals: list[Principal], members: dict[str, set[str]] | None = None):
        self.principals = {p.id: p for p in principals}
        self.members: dict[str, set[str]] = members or {}
        self.add_calls: list[tuple[str, str]] = []
        self.remove_calls: list[tuple[str, str]] = []
        self.list_calls: list[tuple[str, PrincipalKind]] = []
        self.fail_ids: set[str] = set()
        self.raise_on_resolve: set[str] = set()

    async def resolve_principal(self, identifier: str, kind: PrincipalKind) -> Principal | None:
        if identifier in self.raise_on_resolve:
            raise RuntimeError(f"lookup of {identifier} timed out")
        needle = identifier.lower()
        for principal in self.principals.values():
            if principal.kind is not kind:
                continue
            candidates = {principal.id.lower()}
            for value in (principal.upn, principal.mail, principal.device_name):
                if value:
                    candidates.add(value.lower())
            if needle in candidates:
                return principal
        return None

    async def list_members(self, group_id: str, kind: PrincipalKind) -> list[Principal]:
        self.list_calls.append((group_id, kind))
        return [
            self.principals[pid]
            for pid in sorted(self.members.get(group_id, set()))
            if self.principals[pid].kind is kind
        ]

    async def add_member(self, group_id: str, principal_id: str) -> MutationResult:
        self.add_calls.append((group_id, principal_id))
        if principal_id in self.fail_ids:
            return MutationResult.failure("Insufficient privileges to complete the operation.")
        self.members.setdefault(group_id, set()).add(principal_id)
        return MutationResult.success()

    async def remove_member(self, group_id: str, principal_id: str) -> MutationResult:
        self.remove_calls.append((group_id, principal_id))
        if principal_id in self.fail_ids:
            return MutationResult.failure("Request was throttled.")
        self.members.get(group_id, set()).discard(principal_id)
        return MutationResult.success()

    @property
    def mutation_count(self) -> int:
        return len(self.add_calls) + len(self.remove_calls)


@pytest.fixture
def directory():
    """Directory with a@x.com and b@x.com in the group and c@x.com outside it."""
    users = [make_user("a@x.com"), make_user("b@x.com"), make_user("c@x.com")]
    return FakeDirectory(users, members={GROUP_ID: {"id-a", "id-b"}})


@pytest.fixture
def device_directory():
    """Directory with device KIOSK-01 in the group and KIOSK-02 outside it."""
    devices = [make_device("KIOSK-01"), make_device("KIOSK-02")]
    return FakeDirectory(devices, members={GROUP_ID: {"dev-kiosk-01"}})


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set mock environment variables for testing."""
    monkeypatch.setenv("MS_GRAPH_TENANT_ID", "test-tenant-id")
    monkeypatch.setenv("MS_GRAPH_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("MS_GRAPH_CLIENT_SECRET", "test-client-secret")
