"""Intune managed device operations."""

from fleetadmin.devices.actions import (
    ActionOutcome,
    ActionResult,
    ActionStatus,
    ActionSummary,
    DeviceAction,
    ManagedDevice,
    ManagedDeviceManager,
)

__all__ = [
    "ActionOutcome",
    "ActionResult",
    "ActionStatus",
    "ActionSummary",
    "DeviceAction",
    "ManagedDevice",
    "ManagedDeviceManager",
]
