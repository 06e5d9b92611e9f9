"""Intune remote actions (sync, reboot) for managed devices."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from kiota_abstractions.base_request_configuration import RequestConfiguration
from msgraph import GraphServiceClient
from msgraph.generated.device_management.managed_devices.managed_devices_request_builder import (
    ManagedDevicesRequestBuilder,
)

from fleetadmin.core.msgraph_client import get_graph_client
from fleetadmin.core.normalize import escape_odata
from fleetadmin.directory.models import MutationResult

logger = logging.getLogger(__name__)


class DeviceAction(Enum):
    """Remote actions that can be sent to a managed device."""

    SYNC = "sync"
    REBOOT = "reboot"


class ActionStatus(Enum):
    """Terminal state of one device name in a batch."""

    SENT = "sent"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class ManagedDevice:
    """Represents an Intune managed device."""

    id: str
    device_name: str
    operating_system: str | None = None
    user_principal_name: str | None = None
    last_sync: datetime | None = None

    def describe(self) -> str:
        """Display attributes for report lines."""
        parts = [self.device_name]
        if self.operating_system:
            parts.append(self.operating_system)
        if self.user_principal_name:
            parts.append(self.user_principal_name)
        if self.last_sync:
            parts.append(f"last sync {self.last_sync:%Y-%m-%d %H:%M}")
        return " | ".join(parts)


@dataclass
class ActionOutcome:
    """Result of sending an action for one requested device name."""

    device_name: str
    status: ActionStatus
    device: ManagedDevice | None = None
    error_detail: str | None = None


@dataclass
class ActionSummary:
    """Counts of action outcomes per status."""

    sent: int = 0
    not_found: int = 0
    failed: int = 0

    @classmethod
    def from_outcomes(cls, outcomes: list[ActionOutcome]) -> "ActionSummary":
        """Tally a list of outcomes."""
        summary = cls()
        for outcome in outcomes:
            name = outcome.status.value
            setattr(summary, name, getattr(summary, name) + 1)
        return summary

    @property
    def total(self) -> int:
        """Total outcomes counted."""
        return self.sent + self.not_found + self.failed


@dataclass
class ActionResult:
    """Ordered outcomes of one dispatch run."""

    action: DeviceAction
    outcomes: list[ActionOutcome] = field(default_factory=list)
    dry_run: bool = False

    @property
    def summary(self) -> ActionSummary:
        """Counts per status."""
        return ActionSummary.from_outcomes(self.outcomes)

    @property
    def has_failures(self) -> bool:
        """Check if any action failed."""
        return any(o.status is ActionStatus.FAILED for o in self.outcomes)


class ManagedDeviceManager:
    """Find Intune managed devices and send them remote actions."""

    def __init__(self, client: GraphServiceClient | None = None) -> None:
        """Initialize the device manager.

        Args:
            client: Graph client to use (defaults to an app-only client)
        """
        self.client: GraphServiceClient = client or get_graph_client()

    async def find_devices(self, device_name: str) -> list[ManagedDevice]:
        """Find managed devices by exact device name.

        Args:
            device_name: Intune device name

        Returns:
            Matching devices (a name can be enrolled more than once)
        """
        query_params = ManagedDevicesRequestBuilder.ManagedDevicesRequestBuilderGetQueryParameters(
            filter=f"deviceName eq '{escape_odata(device_name.strip())}'",
            select=[
                "id",
                "deviceName",
                "operatingSystem",
                "userPrincipalName",
                "lastSyncDateTime",
            ],
        )
        config = RequestConfiguration(query_parameters=query_params)
        result = await self.client.device_management.managed_devices.get(
            request_configuration=config
        )

        if not result or not result.value:
            return []
        return [self._to_managed_device(device) for device in result.value if device.id]

    def _to_managed_device(self, device) -> ManagedDevice:
        """Convert an MS Graph ManagedDevice to a ManagedDevice."""
        return ManagedDevice(
            id=device.id,
            device_name=device.device_name or "",
            operating_system=device.operating_system,
            user_principal_name=device.user_principal_name,
            last_sync=device.last_sync_date_time,
        )

    async def send_action(self, device_id: str, action: DeviceAction) -> MutationResult:
        """Send a remote action to one managed device.

        Args:
            device_id: Intune managed device ID
            action: Action to send

        Returns:
            MutationResult carrying the error message on failure
        """
        device = self.client.device_management.managed_devices.by_managed_device_id(device_id)
        try:
            if action is DeviceAction.SYNC:
                await device.sync_device.post()
            else:
                await device.reboot_now.post()
            logger.debug(f"Sent {action.value} to device {device_id}")
            return MutationResult.success()
        except Exception as e:
            logger.error(f"Failed to send {action.value} to device {device_id}: {e}")
            return MutationResult.failure(str(e))

    async def dispatch(
        self,
        action: DeviceAction,
        device_names: list[str],
        dry_run: bool = False,
    ) -> ActionResult:
        """Send an action to every managed device matching each name.

        Names are processed one at a time; a failure for one device never
        stops the batch.

        Args:
            action: Action to send
            device_names: Device names to target
            dry_run: If True, look devices up but send nothing

        Returns:
            ActionResult with one outcome per matched device (or one
            NOT_FOUND/FAILED outcome for a name with no usable match)

        Raises:
            ValueError: If no device names were given
        """
        if not device_names:
            raise ValueError("No device names to process")

        logger.info(f"Sending {action.value} to {len(device_names)} device name(s)")
        result = ActionResult(action=action, dry_run=dry_run)

        for name in device_names:
            try:
                devices = await self.find_devices(name)
            except Exception as e:
                logger.debug(f"Lookup of {name} raised: {e}")
                result.outcomes.append(
                    ActionOutcome(name, ActionStatus.FAILED, error_detail=str(e))
                )
                continue

            if not devices:
                result.outcomes.append(ActionOutcome(name, ActionStatus.NOT_FOUND))
                continue

            for device in devices:
                if dry_run:
                    sent = MutationResult.success()
                else:
                    sent = await self.send_action(device.id, action)

                if sent.ok:
                    result.outcomes.append(ActionOutcome(name, ActionStatus.SENT, device))
                else:
                    result.outcomes.append(
                        ActionOutcome(name, ActionStatus.FAILED, device, error_detail=sent.error)
                    )

        return result
