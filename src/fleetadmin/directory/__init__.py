"""Directory access: principal models and the Graph-backed client."""

from fleetadmin.directory.client import DirectoryClient
from fleetadmin.directory.graph import GraphDirectoryClient
from fleetadmin.directory.models import DirectoryGroup, MutationResult, Principal, PrincipalKind

__all__ = [
    "DirectoryClient",
    "DirectoryGroup",
    "GraphDirectoryClient",
    "MutationResult",
    "Principal",
    "PrincipalKind",
]
