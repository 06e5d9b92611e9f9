"""Directory principal models shared by the Graph client and the reconciler."""

from dataclasses import dataclass
from enum import Enum

from fleetadmin.core.normalize import normalize_key

# How a device is joined to the directory (Graph trustType)
TRUST_TYPE_LABELS = {
    "AzureAd": "Entra joined",
    "ServerAd": "Hybrid joined",
    "Workplace": "Entra registered",
}


class PrincipalKind(Enum):
    """Kinds of directory objects a group can contain."""

    USER = "user"
    DEVICE = "device"

    @property
    def odata_type(self) -> str:
        """OData type name Graph reports for members of this kind."""
        return f"#microsoft.graph.{self.value}"

    @property
    def csv_column(self) -> str:
        """Required CSV header for bulk import files of this kind."""
        if self is PrincipalKind.DEVICE:
            return "DeviceName"
        return "EmailAddress"

    @property
    def label(self) -> str:
        """Human-readable plural label."""
        return "devices" if self is PrincipalKind.DEVICE else "users"


@dataclass(frozen=True)
class Principal:
    """A resolved directory object (user or device).

    A snapshot taken at resolution time; it is not re-validated.
    """

    id: str
    display_name: str
    kind: PrincipalKind
    upn: str | None = None
    mail: str | None = None
    employee_id: str | None = None
    department: str | None = None
    device_name: str | None = None
    trust_type: str | None = None

    @property
    def lookup_key(self) -> str | None:
        """Normalized key used by the membership index.

        UPN for users, device name for devices. Users without a UPN and
        devices without a name have no key and cannot be matched.
        """
        if self.kind is PrincipalKind.DEVICE:
            return normalize_key(self.device_name)
        return normalize_key(self.upn)

    def describe(self) -> str:
        """Display attributes for report lines."""
        if self.kind is PrincipalKind.DEVICE:
            parts = [self.device_name or self.display_name]
            if self.trust_type:
                parts.append(TRUST_TYPE_LABELS.get(self.trust_type, self.trust_type))
            return " | ".join(parts)

        parts = [self.display_name]
        if self.upn:
            parts.append(self.upn)
        if self.mail and self.mail.lower() != (self.upn or "").lower():
            parts.append(self.mail)
        if self.employee_id:
            parts.append(f"#{self.employee_id}")
        if self.department:
            parts.append(self.department)
        return " | ".join(parts)


@dataclass(frozen=True)
class DirectoryGroup:
    """Minimal view of an Entra ID group."""

    id: str
    display_name: str
    description: str | None = None


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a single directory mutation call."""

    ok: bool
    error: str | None = None

    @classmethod
    def success(cls) -> "MutationResult":
        """Build a successful result."""
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> "MutationResult":
        """Build a failed result carrying the error message verbatim."""
        return cls(ok=False, error=error)
