"""
Tests for the scanner entry point.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch

import pytest

from ebay_deal_scanner.main import (
    EXIT_ALL_FAILED,
    EXIT_FATAL,
    EXIT_OK,
    async_main,
    format_scan_time,
    parse_args,
)
from ebay_deal_scanner.models import Deal, DeliveryResult, ProfileOutcome, ScanReport
from ebay_deal_scanner.models.config import SystemConfig


@pytest.fixture
def run_env(temp_dir, sample_configuration):
    """Patch the entry point's collaborators and keep files in temp_dir."""
    scan_log_path = temp_dir / "scan-log.txt"
    sample_configuration.system.scan_log_path = str(scan_log_path)
    sample_configuration.system.log_dir = str(temp_dir / "logs")

    orchestrator = Mock()
    orchestrator.run = AsyncMock(return_value=ScanReport())
    notifier = Mock()
    notifier.send_deals.return_value = DeliveryResult(
        success=True, delivery_time=datetime.now(), deals_sent=1
    )

    with patch("ebay_deal_scanner.main.setup_logging"), patch(
        "ebay_deal_scanner.main.SystemConfig",
        return_value=SystemConfig(scan_log_path=str(scan_log_path)),
    ), patch("ebay_deal_scanner.main.ConfigurationManager") as manager, patch(
        "ebay_deal_scanner.main.build_orchestrator", return_value=orchestrator
    ), patch(
        "ebay_deal_scanner.main.build_notifier", return_value=notifier
    ):
        manager.return_value.load_config.return_value = sample_configuration
        yield {
            "manager": manager,
            "orchestrator": orchestrator,
            "notifier": notifier,
            "scan_log_path": scan_log_path,
        }


class TestAsyncMain:
    """Test cases for async_main."""

    @pytest.mark.asyncio
    async def test_no_deals(self, run_env):
        """Test a clean run without deals."""
        exit_code = await async_main("config.yaml")

        assert exit_code == EXIT_OK
        run_env["manager"].assert_called_once_with("config.yaml")
        run_env["notifier"].send_deals.assert_not_called()

        log_text = run_env["scan_log_path"].read_text(encoding="utf-8")
        assert "eBay Deal Monitor Starting" in log_text
        assert "No unicorn deals found this time." in log_text

    @pytest.mark.asyncio
    async def test_deals_are_sent(self, run_env, sample_profile, sample_listing):
        """Test that confirmed deals are handed to the notifier."""
        deal = Deal(listing=sample_listing, profile=sample_profile)
        report = ScanReport()
        report.add(ProfileOutcome(profile=sample_profile, succeeded=True, deals=[deal]))
        run_env["orchestrator"].run.return_value = report

        exit_code = await async_main()

        assert exit_code == EXIT_OK
        run_env["notifier"].send_deals.assert_called_once_with([deal])

    @pytest.mark.asyncio
    async def test_failed_delivery_is_not_fatal(
        self, run_env, sample_profile, sample_listing
    ):
        """Test that a webhook failure is logged but the run still succeeds."""
        report = ScanReport()
        report.add(
            ProfileOutcome(
                profile=sample_profile,
                succeeded=True,
                deals=[Deal(listing=sample_listing, profile=sample_profile)],
            )
        )
        run_env["orchestrator"].run.return_value = report
        run_env["notifier"].send_deals.return_value = DeliveryResult(
            success=False, delivery_time=datetime.now(), error_message="Quota exceeded"
        )

        exit_code = await async_main()

        assert exit_code == EXIT_OK
        assert "Failed to send email: Quota exceeded" in run_env[
            "scan_log_path"
        ].read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_all_profiles_failed(self, run_env, sample_profile, second_profile):
        """Test the exit status when every profile fails."""
        report = ScanReport()
        report.add(ProfileOutcome(profile=sample_profile, succeeded=False, error="x"))
        report.add(ProfileOutcome(profile=second_profile, succeeded=False, error="y"))
        run_env["orchestrator"].run.return_value = report

        assert await async_main() == EXIT_ALL_FAILED

    @pytest.mark.asyncio
    async def test_configuration_error(self, run_env):
        """Test that invalid configuration stops the run before scanning."""
        run_env["manager"].return_value.load_config.side_effect = ValueError(
            "Scraper API key is required"
        )

        exit_code = await async_main()

        assert exit_code == EXIT_FATAL
        run_env["orchestrator"].run.assert_not_called()
        assert "Configuration error" in run_env["scan_log_path"].read_text(
            encoding="utf-8"
        )

    @pytest.mark.asyncio
    async def test_unexpected_error(self, run_env):
        """Test that unexpected failures exit with status 1 and still save the log."""
        run_env["orchestrator"].run.side_effect = RuntimeError("boom")

        exit_code = await async_main()

        assert exit_code == EXIT_FATAL
        assert "Fatal error: boom" in run_env["scan_log_path"].read_text(
            encoding="utf-8"
        )


class TestFormatScanTime:
    """Test cases for format_scan_time."""

    def test_adelaide_time(self):
        """Test conversion into the reporting timezone."""
        now = datetime(2026, 1, 15, 0, 0, 0, tzinfo=timezone.utc)

        formatted = format_scan_time("Australia/Adelaide", now)

        assert formatted.startswith("15/01/2026, 10:30:00 AM")

    def test_unknown_timezone_falls_back(self):
        """Test that an unknown zone name still produces a time."""
        now = datetime(2026, 1, 15, 0, 0, 0, tzinfo=timezone.utc)

        assert "2026" in format_scan_time("Not/AZone", now)


class TestParseArgs:
    """Test cases for parse_args."""

    def test_defaults(self):
        """Test the default arguments."""
        args = parse_args([])

        assert args.config_path is None
        assert args.log_level is None

    def test_explicit_values(self):
        """Test explicit config path and log level."""
        args = parse_args(["config/config.yaml", "--log-level", "DEBUG"])

        assert args.config_path == "config/config.yaml"
        assert args.log_level == "DEBUG"
