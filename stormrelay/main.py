"""Process Entry Point.

This module provides the command-line entry point. It's a thin wrapper
that loads configuration, validates it and runs the orchestrator.
"""

import argparse
import logging
import os
import sys

from stormrelay.core.config import Config, validate_config
from stormrelay.orchestrator import Orchestrator, StartupError
from stormrelay.shell.config_loader import load_config, load_config_from_env


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure root logging from LOG_LEVEL."""
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _get_config(config_path: str | None) -> Config:
    """Load configuration from file or environment."""
    config_path = config_path or os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path)
    elif os.environ.get("MESH_DEVICE") or os.environ.get("MESH_HOST"):
        # Simple env-based config
        return load_config_from_env()
    else:
        # Try default config path
        return load_config()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Relay weather warnings, lightning alerts and the daily forecast to a mesh radio",
    )
    parser.add_argument(
        "device",
        nargs="?",
        help="Serial device of the radio (overrides config)",
    )
    parser.add_argument(
        "--config",
        help="Path to YAML config file (default: $CONFIG_PATH or config/config.yaml)",
    )
    parser.add_argument(
        "--host",
        help="Hostname of a network-attached radio (overrides config)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate the configuration and exit",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the relay.

    Returns:
        Process exit code
    """
    configure_logging()
    args = parse_args(argv)

    config = _get_config(args.config)
    if args.device:
        config.mesh.device = args.device
    if args.host:
        config.mesh.host = args.host

    validation = validate_config(config)
    for problem in validation.errors:
        log = logger.error if problem.severity == "error" else logger.warning
        log("Config %s: %s", problem.field, problem.message)

    if not validation.valid:
        return 2
    if args.check:
        logger.info("Configuration OK")
        return 0

    orchestrator = Orchestrator(config)
    try:
        orchestrator.run_forever()
    except (StartupError, OSError) as e:
        logger.error("Startup failed: %s", e)
        orchestrator.stop()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
