#!/usr/bin/env python3
"""Send or receive a file over a serial port with XModem/YModem."""

import argparse
import logging
import sys
from pathlib import Path

from common.protocol import TRACE, Variant
from receiver.runner import run_receiver
from sender.runner import run_sender

logger = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 115200


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add device, baudrate, protocol and logging arguments to a parser."""
    parser.add_argument(
        "-d", "--device", type=str, required=True, help="Serial device path (e.g., /dev/ttyUSB0)"
    )
    parser.add_argument(
        "-b",
        "--baudrate",
        type=int,
        default=DEFAULT_BAUDRATE,
        help=f"Baud rate (default: {DEFAULT_BAUDRATE})",
    )
    parser.add_argument(
        "-p",
        "--protocol",
        type=Variant,
        choices=list(Variant),
        default=Variant.XMODEM_CRC,
        metavar="{" + ",".join(v.value for v in Variant) + "}",
        help=f"Protocol variant (default: {Variant.XMODEM_CRC.value})",
    )
    parser.add_argument(
        "--rtscts", action="store_true", help="Enable RTS/CTS hardware flow control"
    )
    parser.add_argument(
        "--no-latency-fix",
        action="store_true",
        help="Do not lower the FTDI latency timer",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v debug, -vv trace)",
    )
    parser.add_argument("file", type=Path, help="File to send or write")


def _configure_logging(verbosity: int) -> None:
    level = {0: logging.INFO, 1: logging.DEBUG}.get(verbosity, TRACE)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Transfer a file over a serial link",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s send -d /dev/ttyUSB0 firmware.bin            XModem-CRC, 128-byte blocks
  %(prog)s send -d /dev/ttyUSB0 -p ymodem firmware.bin  1K blocks
  %(prog)s receive -d /dev/ttyAMA4 -p xmodem out.bin    8-bit checksum
""",
    )
    subparsers = parser.add_subparsers(dest="mode")

    send_parser = subparsers.add_parser("send", help="Send a file")
    _add_common_args(send_parser)

    receive_parser = subparsers.add_parser("receive", help="Receive a file")
    _add_common_args(receive_parser)

    args = parser.parse_args(argv)

    if args.mode is None:
        parser.print_help()
        return 2

    _configure_logging(args.verbose)

    if args.mode == "send":
        if not args.file.is_file():
            logger.error(f"No such file: {args.file}")
            return 2
        return run_sender(
            args.device, args.baudrate, args.rtscts, args.file, args.protocol, args.no_latency_fix
        )

    return run_receiver(
        args.device, args.baudrate, args.rtscts, args.file, args.protocol, args.no_latency_fix
    )


if __name__ == "__main__":
    sys.exit(main())
