"""Common modules for serial-modem.

This package contains code shared by sender and receiver:
- protocol: ControlByte and Variant enums, timing constants, ByteChannel Protocol
- transfer: Role, Timings, Session dataclasses and the TransferError hierarchy
- checksum: 8-bit sum and CRC-16 block checksums
- block: Block framing and the BlockResult tag
- timer: Deadline timer
- io: Polling byte I/O helpers (read_byte, send_byte, interrupt_transmission)
- device: Serial device setup and FTDI configuration
"""

from common.checksum import ChecksumStrategy, Crc16Checksum, SumChecksum, select_checksum
from common.protocol import (
    LONG_BLOCK_SIZE,
    MAX_ERRORS,
    SHORT_BLOCK_SIZE,
    ByteChannel,
    ControlByte,
    Variant,
)
from common.transfer import (
    PeerCancelledError,
    RetryBudgetExceededError,
    Role,
    Session,
    SynchronizationLostError,
    Timings,
    TransferError,
    TransferInterruptedError,
    TransferTimeoutError,
)

__all__ = [
    # Protocol
    "ControlByte",
    "Variant",
    "ByteChannel",
    "SHORT_BLOCK_SIZE",
    "LONG_BLOCK_SIZE",
    "MAX_ERRORS",
    # Checksums
    "ChecksumStrategy",
    "SumChecksum",
    "Crc16Checksum",
    "select_checksum",
    # Transfer state
    "Role",
    "Session",
    "Timings",
    # Exceptions
    "TransferError",
    "TransferTimeoutError",
    "RetryBudgetExceededError",
    "SynchronizationLostError",
    "PeerCancelledError",
    "TransferInterruptedError",
]
