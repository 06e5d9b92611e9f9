"""Tests for the fleet-device-action CLI."""

import logging
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fleetadmin.devices.actions import (
    ActionOutcome,
    ActionResult,
    ActionStatus,
    DeviceAction,
    ManagedDevice,
)
from fleetadmin.scripts.device_actions import main, report_actions, run_action

KIOSK = ManagedDevice(id="md-1", device_name="KIOSK-01", operating_system="Windows")


@pytest.fixture
def mock_manager():
    """Patch ManagedDeviceManager with a mock whose dispatch is awaitable."""
    manager = MagicMock()
    manager.dispatch = AsyncMock(
        return_value=ActionResult(
            action=DeviceAction.SYNC,
            outcomes=[ActionOutcome("KIOSK-01", ActionStatus.SENT, device=KIOSK)],
        )
    )
    with patch("fleetadmin.scripts.device_actions.ManagedDeviceManager", return_value=manager):
        yield manager


class TestReportActions:
    """Tests for report_actions."""

    def test_lines_and_tally(self, caplog):
        result = ActionResult(
            action=DeviceAction.REBOOT,
            outcomes=[
                ActionOutcome("KIOSK-01", ActionStatus.SENT, device=KIOSK),
                ActionOutcome("GHOST", ActionStatus.NOT_FOUND),
                ActionOutcome("LAB-2", ActionStatus.FAILED, error_detail="Device is offline"),
            ],
        )

        with caplog.at_level(logging.INFO):
            report_actions(result)

        assert "[SENT] KIOSK-01 - KIOSK-01 | Windows" in caplog.messages
        assert "[NOT FOUND] GHOST" in caplog.messages
        assert "[FAILED] LAB-2: Device is offline" in caplog.messages
        assert "Sent: 1 Not found: 1 Failed: 1" in caplog.messages
        failed = [r for r in caplog.records if r.message.startswith("[FAILED]")]
        assert failed[0].levelno == logging.ERROR

    def test_dry_run_tag(self, caplog):
        result = ActionResult(
            action=DeviceAction.SYNC,
            outcomes=[ActionOutcome("KIOSK-01", ActionStatus.SENT, device=KIOSK)],
            dry_run=True,
        )

        with caplog.at_level(logging.INFO):
            report_actions(result)

        assert "[WOULD SEND] KIOSK-01 - KIOSK-01 | Windows" in caplog.messages


class TestRunAction:
    """Tests for run_action."""

    async def test_sends_to_named_devices(self, mock_manager):
        exit_code = await run_action(DeviceAction.SYNC, device_names=[" KIOSK-01 ", ""])

        assert exit_code == 0
        mock_manager.dispatch.assert_awaited_once_with(
            DeviceAction.SYNC, ["KIOSK-01"], dry_run=False
        )

    async def test_reads_csv(self, mock_manager, tmp_path):
        path = tmp_path / "devices.csv"
        path.write_text("DeviceName\nKIOSK-01\nKIOSK-02\n")

        await run_action(DeviceAction.REBOOT, csv_path=path, dry_run=True)

        mock_manager.dispatch.assert_awaited_once_with(
            DeviceAction.REBOOT, ["KIOSK-01", "KIOSK-02"], dry_run=True
        )

    async def test_failures_set_exit_code(self, mock_manager):
        mock_manager.dispatch.return_value = ActionResult(
            action=DeviceAction.SYNC,
            outcomes=[ActionOutcome("KIOSK-01", ActionStatus.FAILED, error_detail="Offline")],
        )

        assert await run_action(DeviceAction.SYNC, device_names=["KIOSK-01"]) == 1

    async def test_empty_batch(self, mock_manager):
        assert await run_action(DeviceAction.SYNC, device_names=["  "]) == 1
        mock_manager.dispatch.assert_not_awaited()

    async def test_missing_column(self, mock_manager, tmp_path):
        path = tmp_path / "devices.csv"
        path.write_text("Hostname\nKIOSK-01\n")

        assert await run_action(DeviceAction.SYNC, csv_path=path) == 1
        mock_manager.dispatch.assert_not_awaited()

    async def test_missing_credentials(self):
        with patch(
            "fleetadmin.scripts.device_actions.ManagedDeviceManager",
            side_effect=ValueError("MS Graph credentials not set"),
        ):
            assert await run_action(DeviceAction.SYNC, device_names=["KIOSK-01"]) == 1


class TestMainCLI:
    """Tests for main CLI function."""

    def test_requires_a_source(self):
        with (
            patch.object(sys, "argv", ["fleet-device-action", "sync"]),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 2

    def test_rejects_unknown_action(self):
        with (
            patch.object(sys, "argv", ["fleet-device-action", "wipe", "--devices", "K1"]),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 2

    def test_dispatches_run_action(self):
        run = AsyncMock(return_value=0)
        with (
            patch("fleetadmin.scripts.device_actions.run_action", run),
            patch.object(
                sys, "argv", ["fleet-device-action", "reboot", "--devices", "K1", "K2", "--dry-run"]
            ),
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 0
        run.assert_called_once_with(
            action=DeviceAction.REBOOT,
            csv_path=None,
            device_names=["K1", "K2"],
            dry_run=True,
        )

    def test_verbose_enables_debug_logging(self):
        root = logging.getLogger()
        previous = root.level
        try:
            with (
                patch("fleetadmin.scripts.device_actions.run_action", AsyncMock(return_value=0)),
                patch.object(sys, "argv", ["fleet-device-action", "sync", "-v", "--devices", "K1"]),
                pytest.raises(SystemExit),
            ):
                main()

            assert root.level == logging.DEBUG
        finally:
            root.setLevel(previous)
