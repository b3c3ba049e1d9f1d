"""Receiver block loop for serial-modem.

Contains:
- read_block: Read and classify one block
- read_next_block_start: Wait for the next header, re-sending the last reply
- process_data_blocks: Full receiver side of a transfer after the handshake
"""

import logging
from typing import BinaryIO

from common.block import BLOCK_START_BYTES, BlockResult, complement, size_for_header
from common.io import drain_input, interrupt_transmission, read_byte, read_bytes, send_byte, short_sleep
from common.protocol import LOG_PROGRESS_INTERVAL, MAX_ERRORS, TRACE, ByteChannel, ControlByte
from common.timer import Timer
from common.transfer import (
    PeerCancelledError,
    RetryBudgetExceededError,
    Session,
    SynchronizationLostError,
    TransferTimeoutError,
)

logger = logging.getLogger(__name__)


def read_block(port: ByteChannel, session: Session, header: int) -> tuple[BlockResult, bytes]:
    """Read the rest of a block whose header byte was already consumed.

    The whole block must arrive within timings.block_read_s.

    Returns (result, payload); payload is empty unless result is ACCEPTED.
    A repeated block is read to the end and discarded.
    """
    assert session.checksum is not None
    block_size = size_for_header(header)
    remaining = block_size + session.checksum.size
    timer = Timer(session.timings.block_read_s).start()
    cancel, poll_s = session.cancel, session.timings.poll_interval_s

    sequence = read_byte(port, timer, cancel, poll_s)
    if sequence is None:
        return BlockResult.TIMEOUT, b""

    if sequence == session.previous_sequence:
        read_bytes(port, 1 + remaining, timer, cancel, poll_s)
        return BlockResult.REPEATED, b""

    if sequence != session.sequence:
        logger.error(f"Receiver: expected block {session.sequence}, got {sequence}")
        return BlockResult.SYNC_LOST, b""

    inverse = read_byte(port, timer, cancel, poll_s)
    if inverse is None:
        return BlockResult.TIMEOUT, b""
    if inverse != complement(sequence):
        logger.debug(f"Receiver: bad complement 0x{inverse:02x} for block {sequence}")
        read_bytes(port, remaining, timer, cancel, poll_s)
        return BlockResult.INVALID, b""

    body = read_bytes(port, remaining, timer, cancel, poll_s)
    if body is None:
        return BlockResult.TIMEOUT, b""

    payload, trailer = body[:block_size], body[block_size:]
    if not session.checksum.verify(payload, trailer):
        logger.debug(f"Receiver: {session.checksum.name} mismatch on block {sequence}")
        return BlockResult.INVALID, b""

    session.block_size = block_size
    return BlockResult.ACCEPTED, payload


def read_next_block_start(port: ByteChannel, session: Session, last_block_ok: bool) -> int:
    """Wait for the next SOH, STX or EOT.

    Each silent interval repeats our last reply (ACK if last_block_ok, else
    NAK) in case the sender missed it.

    Raises:
        PeerCancelledError: Sender sent CAN.
        TransferTimeoutError: Still silent after MAX_ERRORS repeated replies.
    """
    timer = Timer(session.timings.next_block_s).start()
    error_count = 0

    while True:
        while port.in_waiting > 0:
            data = port.read(1)
            if not data:
                break
            character = data[0]
            if character in BLOCK_START_BYTES or character == ControlByte.EOT:
                return character
            if character == ControlByte.CAN:
                logger.error("Receiver: transmitter cancelled the transfer")
                raise PeerCancelledError("Transmission terminated")

        short_sleep(port, session.cancel, session.timings.poll_interval_s)

        if timer.is_expired():
            error_count += 1
            if error_count > MAX_ERRORS:
                logger.error(f"Receiver: no block from transmitter after {MAX_ERRORS} repeated replies")
                interrupt_transmission(port)
                raise TransferTimeoutError("Timeout, no data received from transmitter")
            reply = ControlByte.ACK if last_block_ok else ControlByte.NAK
            logger.debug(f"Receiver: repeating {reply.name} ({error_count}/{MAX_ERRORS})")
            send_byte(port, reply)
            timer.start()


def process_data_blocks(
    port: ByteChannel, session: Session, character: int, destination: BinaryIO
) -> None:
    """Receive blocks until EOT, writing each accepted payload to destination.

    character is the first byte of the first block, as returned by the
    handshake.

    Raises:
        SynchronizationLostError: Sequence number out of step.
        RetryBudgetExceededError: MAX_ERRORS bad blocks in a row.
        PeerCancelledError / TransferTimeoutError: See read_next_block_start.
    """
    while True:
        if character == ControlByte.EOT:
            send_byte(port, ControlByte.ACK)
            logger.info(
                f"Receiver: end of transmission ({session.blocks} blocks, "
                f"{session.bytes_transferred} bytes)"
            )
            return

        result, payload = read_block(port, session, character)

        match result:
            case BlockResult.ACCEPTED:
                destination.write(payload)
                logger.log(TRACE, f"Receiver: accepted block {session.sequence}")
                session.advance(len(payload))
                send_byte(port, ControlByte.ACK)
                last_block_ok = True
                if session.blocks % LOG_PROGRESS_INTERVAL == 0:
                    logger.debug(
                        f"Receiver: progress {session.blocks} blocks "
                        f"({session.bytes_transferred} bytes)"
                    )
            case BlockResult.REPEATED:
                session.duplicates += 1
                logger.warning(f"Receiver: block {session.previous_sequence} repeated, re-sending ACK")
                send_byte(port, ControlByte.ACK)
                last_block_ok = True
            case BlockResult.SYNC_LOST:
                interrupt_transmission(port)
                raise SynchronizationLostError("Fatal transmission error")
            case BlockResult.INVALID | BlockResult.TIMEOUT:
                error_count = session.record_error()
                logger.debug(
                    f"Receiver: block {session.sequence} {result.name.lower()} "
                    f"({error_count}/{MAX_ERRORS})"
                )
                if error_count >= MAX_ERRORS:
                    logger.error(f"Receiver: giving up on block {session.sequence}")
                    interrupt_transmission(port)
                    raise RetryBudgetExceededError("Transmission aborted, error count exceeded max")
                drain_input(port)
                send_byte(port, ControlByte.NAK)
                last_block_ok = False

        character = read_next_block_start(port, session, last_block_ok)
