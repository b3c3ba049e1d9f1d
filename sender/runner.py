"""Sender runner for serial-modem.

Contains run_sender() which opens the serial port, sends one file and
returns an exit code based on the result. SIGINT/SIGTERM cancel the
transfer cleanly (CAN is sent to the receiver).
"""

import logging
import signal
import threading
from pathlib import Path
from types import FrameType

from common.device import configure_ftdi_latency_timer, open_serial
from common.protocol import Variant
from common.transfer import Role, Session, TransferError
from modem import Modem
from session.report import TransferReport
from session.result import ExitCode, TransferResult

logger = logging.getLogger(__name__)


def run_sender(
    device: str,
    baudrate: int,
    rtscts: bool,
    path: Path,
    variant: Variant,
    no_latency_fix: bool = False,
) -> int:
    """Send path over device using variant. Returns exit code."""
    cancel = threading.Event()

    def handle_signal(_sig: int, _frame: FrameType | None) -> None:
        logger.warning("Signal received - cancelling transfer")
        cancel.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    if not no_latency_fix:
        configure_ftdi_latency_timer(device)

    try:
        ser = open_serial(device, baudrate, rtscts)
    except Exception as e:
        logger.error(f"Failed to open serial port: {e}")
        return ExitCode.PORT_ERROR

    try:
        modem = Modem(ser, cancel=cancel)
        logger.info(f"Sender: sending {path} ({variant.value})")
        error: Exception | None = None
        try:
            modem.send_file(path, use_1k_blocks=variant.use_1k_blocks)
        except (TransferError, OSError) as e:
            logger.error(f"Transfer failed: {e}")
            error = e

        session = modem.last_session or Session(role=Role.SENDER)
        result = TransferResult.from_session(session, variant, error)
        TransferReport(result=result).print()
        return result.exit_code

    finally:
        ser.close()
        logger.info(f"Closed {device}")
