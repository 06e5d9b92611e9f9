"""Configuration loading utilities."""

import json
import os
from pathlib import Path

from dotenv import load_dotenv

from fleetadmin.core.normalize import is_guid, normalize_key


GRAPH_CREDENTIAL_VARS = ("MS_GRAPH_TENANT_ID", "MS_GRAPH_CLIENT_ID", "MS_GRAPH_CLIENT_SECRET")


def get_graph_credentials() -> tuple[str, str, str]:
    """Read the app registration used for Graph from the environment (or .env).

    Returns:
        Tuple of (tenant_id, client_id, client_secret)

    Raises:
        ValueError: Naming every credential variable that is not set
    """
    load_dotenv()

    settings = {name: os.getenv(name, "").strip() for name in GRAPH_CREDENTIAL_VARS}
    missing = [name for name, value in settings.items() if not value]
    if missing:
        raise ValueError(f"MS Graph credentials not set. Missing: {', '.join(missing)}")

    tenant_id, client_id, client_secret = settings.values()
    return tenant_id, client_id, client_secret


def get_project_root() -> Path:
    """Get the project root directory."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").exists():
            return parent
    raise RuntimeError("Could not find project root (no pyproject.toml found)")


def load_group_aliases(config_path: Path | str | None = None) -> dict[str, str]:
    """Load group aliases from config file.

    The file maps short, memorable names to Entra group object IDs::

        {"groups": {"kiosks": "00000000-0000-0000-0000-000000000000"}}

    Args:
        config_path: Path to config file. If None, uses config/groups.json
            under the project root.

    Returns:
        Dict mapping lower-cased alias to group ID (empty if no config file)
    """
    if config_path is None:
        try:
            config_path = get_project_root() / "config" / "groups.json"
        except RuntimeError:
            return {}

    config_path = Path(config_path)
    if not config_path.exists():
        return {}

    with config_path.open() as f:
        config_data = json.load(f)

    aliases = config_data.get("groups", {})
    return {alias.strip().lower(): group_id for alias, group_id in aliases.items()}


def resolve_group_reference(ref: str, aliases: dict[str, str] | None = None) -> str | None:
    """Resolve a group reference to a group ID without calling the directory.

    Resolution order: configured alias, then a literal object ID.

    Args:
        ref: Alias, object ID, or display name typed by the user
        aliases: Alias mapping from load_group_aliases()

    Returns:
        Group ID, or None if the reference must be looked up by display name
    """
    key = normalize_key(ref)
    if key is None:
        return None
    if aliases and key in aliases:
        return aliases[key]
    if is_guid(ref):
        return ref.strip()
    return None
