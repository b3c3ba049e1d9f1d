"""Byte-level I/O helpers for serial-modem.

Every wait in the engine polls the channel: check in_waiting, return data if
any, otherwise sleep POLL_INTERVAL_S and check again until the timer expires.
Each sleep observes the caller's cancellation token.

Contains:
- drain_input: Clear stale data from input buffer
- short_sleep: One poll interval, raising on cancellation
- read_byte / read_bytes: Polling reads bounded by a Timer
- send_byte: Write and flush a single control byte
- interrupt_transmission: Send CAN twice, best effort
"""

import logging
import threading
import time

import serial

from common.protocol import POLL_INTERVAL_S, TRACE, ByteChannel, ControlByte
from common.timer import Timer
from common.transfer import TransferInterruptedError

logger = logging.getLogger(__name__)


def drain_input(port: ByteChannel) -> int:
    """Drain stale data from input buffer. Returns bytes drained."""
    count = port.in_waiting
    if count > 0:
        port.read(count)
        logger.debug(f"Drained {count} stale bytes from input buffer")
    return count


def send_byte(port: ByteChannel, value: int) -> None:
    """Write a single byte and flush it immediately."""
    port.write(bytes([value]))
    port.flush()
    logger.log(TRACE, f"Sent 0x{value:02x}")


def interrupt_transmission(port: ByteChannel) -> None:
    """Send CAN twice to abort the peer. Write failures are only logged."""
    try:
        port.write(bytes([ControlByte.CAN, ControlByte.CAN]))
        port.flush()
    except (serial.SerialException, OSError) as e:
        logger.warning(f"Failed to send cancel to peer: {e}")
        return
    logger.debug("Sent CAN CAN")


def short_sleep(
    port: ByteChannel,
    cancel: threading.Event | None = None,
    interval_s: float = POLL_INTERVAL_S,
) -> None:
    """Sleep one poll interval.

    Raises TransferInterruptedError (after cancelling the peer) if the
    cancellation token is set before or during the sleep.
    """
    if cancel is None:
        time.sleep(interval_s)
        return
    if cancel.is_set() or cancel.wait(interval_s):
        interrupt_transmission(port)
        raise TransferInterruptedError("Transmission was interrupted")


def read_byte(
    port: ByteChannel,
    timer: Timer,
    cancel: threading.Event | None = None,
    interval_s: float = POLL_INTERVAL_S,
) -> int | None:
    """Read one byte, polling until it arrives. Returns None if timer expires."""
    while True:
        if port.in_waiting > 0:
            data = port.read(1)
            if data:
                return data[0]
        if timer.is_expired():
            return None
        short_sleep(port, cancel, interval_s)


def read_bytes(
    port: ByteChannel,
    count: int,
    timer: Timer,
    cancel: threading.Event | None = None,
    interval_s: float = POLL_INTERVAL_S,
) -> bytes | None:
    """Read exactly count bytes. Returns None if timer expires first."""
    buf = bytearray()
    while True:
        available = port.in_waiting
        if available > 0:
            buf += port.read(min(available, count - len(buf)))
        if len(buf) >= count:
            return bytes(buf)
        if timer.is_expired():
            logger.debug(f"Timeout after {len(buf)}/{count} bytes")
            return None
        short_sleep(port, cancel, interval_s)
