"""
dlclient CLI entry point.

Usage:
    DLSecret=XXXX dlclient      # Start an interactive session with the bot
    dlclient --help

Type messages at the prompt; "exit" quits.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger


USAGE = "Run with your bot's DirectLine secret\nDLSecret=XXXX dlclient"

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"


def configure_logging(level: str = "INFO", log_file: str = "") -> None:
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level)
    if log_file:
        logger.add(
            Path(log_file).expanduser(),
            rotation="10 MB",
            retention="7 days",
            level="DEBUG",
        )


def main(argv: list[str] | None = None) -> None:
    from dlclient import __version__

    parser = argparse.ArgumentParser(
        prog="dlclient",
        description="dlclient - console chat client for Direct Line bots",
        epilog="Configuration is read from the environment (DLSecret is required).",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"dlclient {__version__}",
    )
    parser.parse_args(argv)

    sys.exit(_run())


def _run() -> int:
    from dlclient.app import ConsoleApp
    from dlclient.config import ClientConfig
    from dlclient.errors import BootstrapError, ConfigurationError, MissingSecretError

    try:
        config = ClientConfig.from_env()
    except MissingSecretError:
        print(USAGE)
        return 1
    except ConfigurationError as exc:
        print(f"ERROR: {exc}")
        return 1

    configure_logging(config.log_level, config.log_file)

    try:
        asyncio.run(ConsoleApp(config).run())
    except BootstrapError:
        # Already logged by the bootstrapper
        return 1
    except KeyboardInterrupt:
        print()
        return 130
    return 0


if __name__ == "__main__":
    main()
