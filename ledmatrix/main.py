#!/usr/bin/env python3
"""
LED Matrix CPU Meter - Application Entry Point

Shows per-CPU utilisation on a left and right LED matrix module.
"""

import argparse
import logging
import sys
import tomllib
from dataclasses import replace
from typing import List, Optional

from .config import default_config, load_from_toml
from .cpu_meter import CpuMeter
from .errors import FatalLinkError, MatrixConnectionError
from .transport import create_transport

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LED matrix CPU meter")
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--left", help="Serial device of the left module")
    parser.add_argument("--right", help="Serial device of the right module")
    parser.add_argument(
        "--mock", action="store_true", help="Do not open hardware, log frames only"
    )
    parser.add_argument(
        "--iterations", type=int, help="Stop after this many updates"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        cfg = load_from_toml(args.config) if args.config else default_config()
        serial_cfg = replace(
            cfg.serial,
            left=args.left or cfg.serial.left,
            right=args.right or cfg.serial.right,
            mock=args.mock or cfg.serial.mock,
        )
        cfg = replace(cfg, serial=serial_cfg)
    except (FileNotFoundError, tomllib.TOMLDecodeError, ValueError) as e:
        logger.error(f"Unable to load configuration: {e}")
        return 1

    try:
        with create_transport(cfg.serial.left, not cfg.serial.mock) as left, \
                create_transport(cfg.serial.right, not cfg.serial.mock) as right:
            CpuMeter(left, right, cfg).run(args.iterations)
    except MatrixConnectionError as e:
        logger.error(f"Unable to open port: {e}")
        return 1
    except FatalLinkError as e:
        logger.error(f"Something new happened, unsure how to recover: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("CPU meter stopped by user")

    return 0


if __name__ == "__main__":
    sys.exit(main())
