"""Identifier batches from prompts and CSV files."""

import csv
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class BatchInputError(ValueError):
    """Raised when a batch of identifiers cannot be read."""


def parse_identifiers(text: str) -> list[str]:
    """Split whitespace-separated identifiers typed at a prompt.

    Args:
        text: Raw input, e.g. "a@x.com b@x.com\\nc@x.com"

    Returns:
        Identifiers in input order (duplicates kept)
    """
    return text.split()


def read_identifiers_csv(path: Path | str, column: str) -> list[str]:
    """Read identifiers from one column of a CSV file.

    The header match is case-insensitive. Each non-empty, trimmed cell in
    the column becomes one identifier.

    Args:
        path: Path to the CSV file
        column: Required header name (e.g. "EmailAddress", "DeviceName")

    Returns:
        Identifiers in file order (duplicates kept)

    Raises:
        BatchInputError: If the file cannot be read, lacks the column,
            or contains no identifiers
    """
    path = Path(path)
    try:
        # utf-8-sig strips the BOM Excel writes
        with path.open(newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            headers = reader.fieldnames or []
            header = next(
                (h for h in headers if h and h.strip().lower() == column.lower()),
                None,
            )
            if header is None:
                raise BatchInputError(
                    f"CSV file {path} has no '{column}' column (found: {', '.join(headers)})"
                )

            identifiers = []
            for row in reader:
                value = (row.get(header) or "").strip()
                if value:
                    identifiers.append(value)
    except OSError as e:
        raise BatchInputError(f"Cannot read CSV file {path}: {e}") from e
    except (csv.Error, UnicodeDecodeError) as e:
        raise BatchInputError(f"Malformed CSV file {path}: {e}") from e

    if not identifiers:
        raise BatchInputError(f"CSV file {path} has no values in the '{column}' column")

    logger.info(f"Read {len(identifiers)} identifiers from {path}")
    return identifiers
