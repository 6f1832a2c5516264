"""Main entry point for the connectivity watchdog."""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

import structlog
from structlog.stdlib import LoggerFactory

from .app.app_manager import AppManager
from .config import Config as AppConfig
from .core.errors import ConfigError
from .detector.startup_detector import StartupDetector
from .health.healthcheck import HttpHealthCheck
from .monitor.connectivity_monitor import ConnectivityMonitor
from .notify.email_notifier import EmailNotifier, LogNotifier
from .probe.ip_prober import HttpAddressProber
from .storage.state_store import JsonStateStore
from .utils.uptime import ProcUptimeSource

logger = structlog.get_logger()


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure structured logging to the console and, optionally, a JSON file.

    Args:
        level: Root logging level name
        log_file: Path of the JSON log file, None or empty to disable it
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Set up different renderers for console and file outputs
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(),
        foreign_pre_chain=shared_processors,
    ))
    handlers: List[logging.Handler] = [console_handler]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=shared_processors,
        ))
        handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", handlers=handlers, force=True)


def parse_arguments(argv: Optional[List[str]] = None) -> dict:
    """Parse command line arguments into dynamic config settings."""
    parser = argparse.ArgumentParser(description="Internet connectivity watchdog")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--interval",
        type=str,
        default=None,
        help="Seconds between connectivity checks (overrides MONITOR_INTERVAL)",
    )
    parser.add_argument(
        "--state-file",
        type=str,
        default=None,
        help="Path of the persisted state file (overrides STATE_FILE_PATH)",
    )

    args = parser.parse_args(argv)

    settings = {}
    if args.debug:
        settings["log_level"] = "DEBUG"
    if args.interval is not None:
        settings["monitor_interval"] = args.interval
    if args.state_file:
        settings["state_file_path"] = args.state_file
    return settings


def build_app(config: AppConfig) -> AppManager:
    """Wire the watchdog components together from configuration."""
    store = JsonStateStore(config.state_file_path)
    prober = HttpAddressProber(config.ip_services or None, timeout=config.probe_timeout)

    if config.email_enabled:
        notifier = EmailNotifier(
            app_name=config.app_name,
            host=config.smtp_host,
            port=config.smtp_port,
            user=config.smtp_user,
            password=config.smtp_password,
            to=config.email_to,
        )
    else:
        logger.warning("EMAIL_TO is not set, notifications will only be logged")
        notifier = LogNotifier(config.app_name)

    healthcheck = HttpHealthCheck(config.healthcheck_url) if config.healthcheck_url else None

    monitor = ConnectivityMonitor(
        store=store,
        prober=prober,
        notifier=notifier,
        healthcheck=healthcheck,
        interval=config.monitor_interval,
    )
    detector = StartupDetector(store, ProcUptimeSource())

    return AppManager(
        store=store,
        prober=prober,
        notifier=notifier,
        detector=detector,
        monitor=monitor,
        app_name=config.app_name,
    )


async def main(config: Optional[AppConfig] = None) -> int:
    """Main application function."""
    if config is None:
        try:
            config = AppConfig()
        except ConfigError as e:
            logger.error(f"Error loading configuration: {e}")
            return 1

    logger.info(f"Starting {config.app_name}")

    shutdown_event = asyncio.Event()
    app_manager = build_app(config)

    def signal_handler():
        logger.info("Signal received, initiating graceful shutdown...")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    try:
        await app_manager.initialize()
        await app_manager.start()

        logger.info("Service running. Press Ctrl+C to stop...")
        await shutdown_event.wait()
    except Exception as e:
        logger.error(f"An error occurred: {e}")
        return 1
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)

        logger.info("Performing cleanup...")
        try:
            await app_manager.stop()
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")
        logger.info("Service stopped")

    return 0


def run(argv: Optional[List[str]] = None) -> int:
    """Console script entry point."""
    try:
        settings = parse_arguments(argv)
        AppConfig.update(settings)
        config = AppConfig()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(config.log_level, config.log_file)

    try:
        return asyncio.run(main(config)) or 0
    except KeyboardInterrupt:
        print("\nShutdown requested by keyboard interrupt")
        return 130


if __name__ == "__main__":
    sys.exit(run())
