"""Core utilities for Entra ID and Intune administration."""

from fleetadmin.core.config import (
    get_graph_credentials,
    load_group_aliases,
    resolve_group_reference,
)
from fleetadmin.core.msgraph_client import get_credential, get_graph_client

__all__ = [
    "get_credential",
    "get_graph_client",
    "get_graph_credentials",
    "load_group_aliases",
    "resolve_group_reference",
]
