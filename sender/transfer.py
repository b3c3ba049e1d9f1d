"""Sender block loop for serial-modem.

Contains:
- read_chunk: Read up to one block of source data
- send_block: Transmit one block until ACKed or the retry budget is spent
- send_eot: End-of-transmission exchange
- send_stream: Full sender side of a transfer after the handshake
"""

import logging
from typing import BinaryIO

from common.block import encode_block
from common.io import interrupt_transmission, read_byte
from common.protocol import LOG_PROGRESS_INTERVAL, MAX_ERRORS, TRACE, ByteChannel, ControlByte
from common.timer import Timer
from common.transfer import PeerCancelledError, RetryBudgetExceededError, Session

logger = logging.getLogger(__name__)


def read_chunk(source: BinaryIO, size: int) -> bytes:
    """Read size bytes, or fewer only at end of stream."""
    chunk = b""
    while len(chunk) < size:
        data = source.read(size - len(chunk))
        if not data:
            break
        chunk += data
    return chunk


def send_block(port: ByteChannel, session: Session, data: bytes) -> None:
    """Send one block and wait for it to be acknowledged.

    NAK and response timeouts resend the block unchanged. CAN from the
    receiver aborts at once.

    Raises:
        PeerCancelledError: Receiver sent CAN.
        RetryBudgetExceededError: MAX_ERRORS consecutive NAKs/timeouts.
    """
    assert session.checksum is not None
    frame = encode_block(session.sequence, data, session.block_size, session.checksum)
    timer = Timer(session.timings.block_response_s)
    poll_s = session.timings.poll_interval_s

    while session.error_count < MAX_ERRORS:
        port.write(frame)
        port.flush()
        timer.start()
        logger.log(TRACE, f"Sender: sent block {session.sequence} ({len(data)} bytes)")

        while True:
            character = read_byte(port, timer, session.cancel, poll_s)
            if character is None:
                session.record_error()
                logger.debug(
                    f"Sender: timeout waiting for ACK of block {session.sequence} "
                    f"({session.error_count}/{MAX_ERRORS})"
                )
                break
            if character == ControlByte.ACK:
                session.advance(len(data))
                return
            if character == ControlByte.NAK:
                session.record_error()
                logger.debug(
                    f"Sender: NAK for block {session.sequence} "
                    f"({session.error_count}/{MAX_ERRORS})"
                )
                break
            if character == ControlByte.CAN:
                logger.error("Sender: receiver cancelled the transfer")
                raise PeerCancelledError("Transmission terminated")

    logger.error(f"Sender: giving up on block {session.sequence} after {MAX_ERRORS} errors")
    interrupt_transmission(port)
    raise RetryBudgetExceededError("Too many errors caught, abandoning transfer")


def send_eot(port: ByteChannel, session: Session) -> bool:
    """Send EOT until it is acknowledged.

    Returns True if ACKed, False if every attempt went unanswered.
    Running out of attempts is not an error.
    Raises PeerCancelledError if the receiver sends CAN.
    """
    timer = Timer(session.timings.eot_response_s)
    poll_s = session.timings.poll_interval_s

    for attempt in range(1, MAX_ERRORS + 1):
        port.write(bytes([ControlByte.EOT]))
        port.flush()
        character = read_byte(port, timer.start(), session.cancel, poll_s)
        if character == ControlByte.ACK:
            logger.debug("Sender: EOT acknowledged")
            return True
        if character == ControlByte.CAN:
            logger.error("Sender: receiver cancelled at end of transmission")
            raise PeerCancelledError("Transmission terminated")
        logger.debug(f"Sender: no ACK for EOT (attempt {attempt}/{MAX_ERRORS})")

    logger.warning(f"Sender: EOT not acknowledged after {MAX_ERRORS} attempts, finishing anyway")
    return False


def send_stream(port: ByteChannel, session: Session, source: BinaryIO) -> None:
    """Send every chunk of source, then end the transmission."""
    while True:
        data = read_chunk(source, session.block_size)
        if not data:
            break
        send_block(port, session, data)
        if session.blocks % LOG_PROGRESS_INTERVAL == 0:
            logger.debug(
                f"Sender: progress {session.blocks} blocks ({session.bytes_transferred} bytes)"
            )

    send_eot(port, session)
