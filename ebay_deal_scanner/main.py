"""
Main entry point for the eBay Deal Scanner.
"""

import argparse
import asyncio
import sys
from datetime import datetime
from typing import List, Optional

from dateutil import tz

from .models.config import SystemConfig
from .orchestrator import build_notifier, build_orchestrator
from .services.config_manager import ConfigurationManager
from .utils.logging import ScanLog, get_logger, setup_logging

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_ALL_FAILED = 2

RULE = "═" * 59


def format_scan_time(timezone_name: str, now: Optional[datetime] = None) -> str:
    """Current time in the scan's reporting timezone."""
    zone = tz.gettz(timezone_name) or tz.tzlocal()
    moment = (now or datetime.now(tz.tzutc())).astimezone(zone)
    return moment.strftime("%d/%m/%Y, %I:%M:%S %p %Z")


async def async_main(
    config_path: Optional[str] = None, log_level: Optional[str] = None
) -> int:
    """
    Run one scan over every configured search profile.

    Returns:
        Process exit status: 0 on success, 1 on configuration or fatal
        errors, 2 when every profile failed
    """
    scan_log = ScanLog()
    defaults = SystemConfig()
    setup_logging(log_dir=defaults.log_dir, log_level=log_level or defaults.log_level)
    logger = get_logger("main", sink=scan_log)
    scan_log_path = defaults.scan_log_path

    try:
        try:
            config = ConfigurationManager(config_path).load_config()
        except (ValueError, FileNotFoundError) as e:
            logger.error(f"❌ Configuration error: {e}")
            return EXIT_FATAL

        scan_log_path = config.system.scan_log_path
        setup_logging(
            log_dir=config.system.log_dir,
            log_level=log_level or config.system.log_level,
        )

        logger.info(RULE)
        logger.info("🤖 eBay Deal Monitor Starting...")
        logger.info(f"Scan time: {format_scan_time(config.system.timezone)}")
        logger.info(f"Searching for {len(config.searches)} items")
        logger.info(RULE)
        logger.info("✅ Configuration validated", extra=config.summary())

        orchestrator = build_orchestrator(config, scan_log)
        report = await orchestrator.run(config.searches)

        if report.deals:
            delivery = build_notifier(config, scan_log).send_deals(report.deals)
            if not delivery.success:
                logger.error(f"❌ Failed to send email: {delivery.error_message}")
        else:
            logger.info("💭 No unicorn deals found this time.")

        logger.info("✅ Monitoring complete!")

        if report.all_failed:
            logger.error("❌ All searches failed - exiting with error")
            return EXIT_ALL_FAILED

        return EXIT_OK

    except Exception as e:
        logger.critical(f"💥 Fatal error: {e}", exc_info=True)
        return EXIT_FATAL

    finally:
        scan_log.save(scan_log_path)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scan eBay for underpriced listings and email the best deals"
    )
    parser.add_argument(
        "config_path",
        nargs="?",
        help="Configuration file (default: config/config.yaml or the environment)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console and file log level (default: from configuration)",
    )
    return parser.parse_args(argv)


def main():
    """Main application entry point."""
    args = parse_args()

    try:
        exit_code = asyncio.run(async_main(args.config_path, args.log_level))
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
        exit_code = EXIT_FATAL

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
