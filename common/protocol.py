"""Protocol definitions for serial-modem.

Contains:
- ControlByte enum for XModem/YModem control characters
- Variant enum mapping protocol names to block size / checksum preferences
- ByteChannel Protocol for type checking
- Block sizes, retry limit and timing constants
- Logging configuration
"""

import logging
import os
from enum import Enum, IntEnum
from typing import Protocol

# TRACE logging level (below DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Progress logging interval in blocks (configurable via envvar)
LOG_PROGRESS_INTERVAL = int(os.environ.get("MODEM_LOG_INTERVAL", "100"))


class ControlByte(IntEnum):
    """Control characters of the XModem family."""

    SOH = 0x01  # Start of 128-byte block
    STX = 0x02  # Start of 1024-byte block
    EOT = 0x04  # End of transmission
    ACK = 0x06
    NAK = 0x15  # Also requests 8-bit checksum at start
    CAN = 0x18
    CPMEOF = 0x1A  # Payload filler
    CRC = 0x43  # 'C', requests CRC-16 at start


class Variant(Enum):
    """Supported protocol variants."""

    XMODEM = "xmodem"
    XMODEM_1K = "xmodem-1k"
    XMODEM_CRC = "xmodem-crc"
    YMODEM = "ymodem"

    @property
    def use_1k_blocks(self) -> bool:
        return self in (Variant.XMODEM_1K, Variant.YMODEM)

    @property
    def use_crc16(self) -> bool:
        return self is not Variant.XMODEM


class ByteChannel(Protocol):
    """Protocol for the duplex byte transport used by the engine."""

    def write(self, data: bytes, /) -> int | None: ...
    def read(self, size: int = ..., /) -> bytes: ...
    def flush(self) -> None: ...
    @property
    def in_waiting(self) -> int: ...


SHORT_BLOCK_SIZE = 128
LONG_BLOCK_SIZE = 1024

# Consecutive errors tolerated on one block or handshake step
MAX_ERRORS = 10

# Default timing constants
RECEIVER_WAIT_TIMEOUT_S = 60.0  # Sender waits this long for NAK/'C'
START_REQUEST_INTERVAL_S = 3.0  # Receiver repeats NAK/'C' at this interval
BLOCK_RESPONSE_TIMEOUT_S = 10.0  # Sender waits for ACK/NAK per block
BLOCK_READ_TIMEOUT_S = 1.0  # Receiver reads a whole block within this
NEXT_BLOCK_TIMEOUT_S = 1.0  # Receiver waits for next block start
EOT_RESPONSE_TIMEOUT_S = 1.0  # Sender waits for ACK after EOT
POLL_INTERVAL_S = 0.01
