#!/usr/bin/env python3
"""
Command-line interface for bme280plugin.

Meant to be run by mackerel-agent:

    [plugin.metrics.bme280]
    command = ["mackerel-plugin-bme280", "--metric-key-prefix", "bme280"]
"""

import argparse
import logging
import sys

from .collector import CollectionError, Collector
from .config import LOG_LEVELS, load_config, validate_config
from .plugin import MackerelPlugin
from .schema import PROFILES


def setup_logging(log_level: str = "WARNING") -> None:
    """Set up logging configuration. Logs go to stderr, stdout carries metrics."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Mackerel plugin for BME280 / SHT2x / TSL2561 sensors on I2C"
    )

    parser.add_argument(
        "--metric-key-prefix",
        help="Metric key prefix (default: bme280)",
        default=None
    )

    parser.add_argument(
        "--tempfile",
        help="Temp file name",
        default=None
    )

    parser.add_argument(
        "--profile",
        choices=sorted(PROFILES),
        help="Device inventory and metric key naming",
        default=None
    )

    parser.add_argument(
        "--config",
        "-c",
        help="Path to configuration file",
        default=None
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Set logging level"
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> dict:
    """Load the config file and apply command line overrides."""
    config = load_config(args.config)
    if args.metric_key_prefix is not None:
        config["metric_key_prefix"] = args.metric_key_prefix
    if args.tempfile is not None:
        config["tempfile"] = args.tempfile
    if args.profile is not None:
        config["profile"] = args.profile
    if args.debug:
        config["log_level"] = "DEBUG"
    elif args.log_level is not None:
        config["log_level"] = args.log_level
    validate_config(config)
    return config


def main(argv=None) -> int:
    """Main entry point for the CLI application."""
    args = parse_args(argv)
    logger = logging.getLogger(__name__)
    try:
        config = build_config(args)
        setup_logging(config["log_level"])

        profile = PROFILES[config["profile"]]
        logger.debug(f"Loaded configuration: {config}")

        collector = Collector(config, profile)
        plugin = MackerelPlugin(
            collector,
            profile.graphs,
            prefix=config["metric_key_prefix"],
            tempfile_path=config["tempfile"],
        )
        plugin.run()
        return 0

    except CollectionError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
