"""Receiver-side handshake for serial-modem.

The receiver starts a transfer by repeating its start request until the
first block header arrives:
  - 'C' when CRC-16 is wanted
  - NAK for the 8-bit checksum
"""

import logging

from common.block import BLOCK_START_BYTES
from common.io import interrupt_transmission, send_byte, short_sleep
from common.protocol import MAX_ERRORS, ByteChannel, ControlByte
from common.timer import Timer
from common.transfer import Session, TransferTimeoutError

logger = logging.getLogger(__name__)


def request_transmission_start(port: ByteChannel, session: Session, use_crc16: bool) -> int:
    """Request transmission and return the first byte of the first block.

    The request is repeated every timings.start_request_s. On the
    MAX_ERRORS-th silent interval the peer is cancelled.

    Returns SOH or STX. Any other byte, EOT included, is line noise here.
    Raises TransferTimeoutError if the sender never starts, which is also how
    an empty file from the sender ends.
    """
    request = ControlByte.CRC if use_crc16 else ControlByte.NAK
    interval_s = session.timings.start_request_s
    poll_s = session.timings.poll_interval_s
    error_count = 0

    logger.info(f"Receiver: requesting transmission ({'CRC-16' if use_crc16 else 'checksum'})")
    send_byte(port, request)
    timer = Timer(interval_s).start()

    while True:
        while port.in_waiting > 0:
            data = port.read(1)
            if not data:
                break
            character = data[0]
            if character in BLOCK_START_BYTES:
                logger.info("Receiver: transmitter started")
                return character
            logger.debug(f"Receiver: ignoring 0x{character:02x} before first block")

        short_sleep(port, session.cancel, poll_s)

        if timer.is_expired():
            error_count += 1
            if error_count >= MAX_ERRORS:
                logger.error(f"Receiver: no response after {MAX_ERRORS} start requests")
                interrupt_transmission(port)
                raise TransferTimeoutError("Timeout waiting for transmitter")
            logger.debug(f"Receiver: repeating start request ({error_count}/{MAX_ERRORS})")
            send_byte(port, request)
            timer.start()
