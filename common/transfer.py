"""Transfer state dataclasses and errors for serial-modem.

Contains:
- Role: Enum for sender/receiver role
- TransferError and its subclasses: fatal transfer failures
- Timings: Deadlines and poll interval used by one transfer
- Session: Mutable state of one send/receive call
"""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum

from common.checksum import ChecksumStrategy
from common.protocol import (
    BLOCK_READ_TIMEOUT_S,
    BLOCK_RESPONSE_TIMEOUT_S,
    EOT_RESPONSE_TIMEOUT_S,
    NEXT_BLOCK_TIMEOUT_S,
    POLL_INTERVAL_S,
    RECEIVER_WAIT_TIMEOUT_S,
    SHORT_BLOCK_SIZE,
    START_REQUEST_INTERVAL_S,
)


class Role(Enum):
    """Role in a transfer."""

    SENDER = "sender"
    RECEIVER = "receiver"


class TransferError(Exception):
    """Raised when a transfer fails. Base of all engine errors."""

    pass


class TransferTimeoutError(TransferError):
    """Raised when the peer stays silent past the allowed waits."""

    pass


class RetryBudgetExceededError(TransferError):
    """Raised after MAX_ERRORS consecutive bad or missing blocks."""

    pass


class SynchronizationLostError(TransferError):
    """Raised when the receiver sees a sequence number it cannot place."""

    pass


class PeerCancelledError(TransferError):
    """Raised when the peer sends CAN."""

    pass


class TransferInterruptedError(TransferError):
    """Raised when the caller cancels a running transfer."""

    pass


@dataclass(frozen=True)
class Timings:
    """Deadlines for one transfer, in seconds."""

    receiver_wait_s: float = RECEIVER_WAIT_TIMEOUT_S
    start_request_s: float = START_REQUEST_INTERVAL_S
    block_response_s: float = BLOCK_RESPONSE_TIMEOUT_S
    block_read_s: float = BLOCK_READ_TIMEOUT_S
    next_block_s: float = NEXT_BLOCK_TIMEOUT_S
    eot_response_s: float = EOT_RESPONSE_TIMEOUT_S
    poll_interval_s: float = POLL_INTERVAL_S


@dataclass
class Session:
    """State of one transfer.

    sequence is kept modulo 256 and is the number of the next block to
    send or accept. error_count counts consecutive failures on that block.
    """

    role: Role
    timings: Timings = field(default_factory=Timings)
    cancel: threading.Event | None = None
    block_size: int = SHORT_BLOCK_SIZE
    checksum: ChecksumStrategy | None = None
    sequence: int = 1
    error_count: int = 0
    # Set once the peer has answered the start request
    handshake_done: bool = False
    # Statistics
    blocks: int = 0
    bytes_transferred: int = 0
    retries: int = 0
    duplicates: int = 0
    started: float = field(default_factory=time.monotonic)

    @property
    def previous_sequence(self) -> int:
        return (self.sequence - 1) % 256

    @property
    def elapsed_s(self) -> float:
        return time.monotonic() - self.started

    def advance(self, payload_size: int) -> None:
        """Record a completed block and move to the next sequence number."""
        self.sequence = (self.sequence + 1) % 256
        self.error_count = 0
        self.blocks += 1
        self.bytes_transferred += payload_size

    def record_error(self) -> int:
        """Count a retryable failure on the current block. Returns the new count."""
        self.error_count += 1
        self.retries += 1
        return self.error_count
