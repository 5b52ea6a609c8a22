# File: src/parkledger/main.py
"""
Main application entry point for the Parking Ledger

Wires configuration, logging, the service and the command shell together:
    parkledger [--input FILE] [--log-level LEVEL] [--log-file PATH]

Results go to stdout; logs go to stderr and, optionally, to a file.
"""

from dataclasses import replace
from typing import List, Optional
import argparse
import logging
import sys

from . import __version__
from .application.commands import CommandProcessor
from .application.config import ServiceConfig
from .application.parking_service import ParkingService
from .presentation.cli import CommandShell


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> logging.Logger:
    """Setup application logging configuration"""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )
    return logging.getLogger("parkledger")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parkledger",
        description="Parking lot ledger driven by one-letter commands"
    )
    parser.add_argument("--input", metavar="FILE", help="read commands from FILE instead of stdin")
    parser.add_argument("--log-level", metavar="LEVEL",
                        help="logging level (default: PARKLEDGER_LOG_LEVEL or WARNING)")
    parser.add_argument("--log-file", metavar="PATH", help="also write logs to PATH")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


class ParkingApplication:
    """Main application controller that sets up all components"""

    def __init__(self, config: ServiceConfig):
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

        # Dependency injection: service -> processor -> shell
        self.service = ParkingService.create_default(config)
        self.processor = CommandProcessor(self.service)
        self.logger.info(f"Parking ledger {__version__} initialized")

    def run(self, input_stream, output_stream) -> int:
        return CommandShell(self.processor, input_stream, output_stream).run()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application"""
    args = build_parser().parse_args(argv)

    try:
        config = ServiceConfig.from_env()
        if args.log_level:
            config = replace(config, log_level=args.log_level)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    try:
        logger = setup_logging(config.log_level, args.log_file)
    except OSError as e:
        print(f"Configuration error: cannot open log file: {e}", file=sys.stderr)
        return 2

    app = ParkingApplication(config)

    try:
        if args.input:
            with open(args.input, encoding="utf-8") as stream:
                app.run(stream, sys.stdout)
        else:
            app.run(sys.stdin, sys.stdout)
    except OSError as e:
        logger.error(f"Cannot read commands: {e}")
        print(f"Cannot read commands: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
