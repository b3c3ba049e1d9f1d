"""Sender-side handshake for serial-modem.

The sender does not transmit anything until the receiver asks for data:
  - NAK requests blocks with an 8-bit checksum
  - 'C' requests blocks with a CRC-16
Anything else is line noise and is ignored.
"""

import logging

from common.checksum import ChecksumStrategy, select_checksum
from common.io import read_byte
from common.protocol import ControlByte, ByteChannel
from common.timer import Timer
from common.transfer import Session, TransferTimeoutError

logger = logging.getLogger(__name__)


def wait_receiver_request(port: ByteChannel, session: Session) -> ChecksumStrategy:
    """Wait for the receiver's start request and select the checksum.

    Single wait of timings.receiver_wait_s, no retries.
    Raises TransferTimeoutError if the receiver never asks.
    """
    timeout_s = session.timings.receiver_wait_s
    timer = Timer(timeout_s).start()
    logger.info(f"Sender: waiting for receiver (timeout: {timeout_s}s)...")

    while True:
        character = read_byte(port, timer, session.cancel, session.timings.poll_interval_s)
        if character is None:
            raise TransferTimeoutError(f"Sender: timeout ({timeout_s}s) waiting for receiver")

        if character == ControlByte.NAK:
            checksum = select_checksum(use_crc16=False)
        elif character == ControlByte.CRC:
            checksum = select_checksum(use_crc16=True)
        else:
            logger.debug(f"Sender: ignoring 0x{character:02x} while waiting for receiver")
            continue

        logger.info(f"Sender: receiver requested {checksum.name}")
        return checksum
