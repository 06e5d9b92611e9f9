"""Partial-match filtering of group members for display."""

from fleetadmin.directory.models import Principal


def _searchable(principal: Principal) -> list[str]:
    values = [
        principal.display_name,
        principal.upn,
        principal.mail,
        principal.employee_id,
        principal.department,
        principal.device_name,
    ]
    return [v.lower() for v in values if v]


def filter_members(principals: list[Principal], term: str | None = None) -> list[Principal]:
    """Filter members by case-insensitive substring match.

    Only used for showing members; adds and removes never match partially.

    Args:
        principals: Members to filter
        term: Search term; empty or None returns every member

    Returns:
        Matching principals sorted by display name
    """
    needle = (term or "").strip().lower()
    matches = [p for p in principals if not needle or any(needle in v for v in _searchable(p))]
    return sorted(matches, key=lambda p: (p.display_name.lower(), p.id))
