"""Transfer result types for serial-modem.

Contains:
- ExitCode: Process exit codes for the command-line runners
- TransferResult: Outcome and statistics of one transfer
"""

from dataclasses import dataclass
from enum import IntEnum

from common.protocol import Variant
from common.transfer import (
    Role,
    Session,
    TransferInterruptedError,
    TransferTimeoutError,
)


class ExitCode(IntEnum):
    """Exit codes for transfer runs."""

    SUCCESS = 0
    PORT_ERROR = 1  # Serial port could not be opened
    HANDSHAKE_FAILED = 2  # Peer never started the transfer
    TRANSFER_FAILED = 3  # Aborted after the handshake
    CANCELLED = 4  # Interrupted locally (SIGINT/SIGTERM)


@dataclass
class TransferResult:
    """Result from a send or receive run.

    Attributes:
        success: True if the transfer reached end of transmission.
        role: Sender or receiver.
        variant: Protocol variant requested by the caller.
        blocks: Data blocks acknowledged (sender) or accepted (receiver).
        bytes_transferred: Source bytes sent, or block bytes accepted (padding included).
        retries: NAKs and timeouts that caused a block to be resent.
        duplicates: Repeated blocks discarded by the receiver.
        handshake_done: True once the peer answered the start request.
        elapsed_s: Duration of the transfer in seconds.
        error: Exception that ended the transfer, if it failed.
    """

    success: bool
    role: Role
    variant: Variant
    blocks: int = 0
    bytes_transferred: int = 0
    retries: int = 0
    duplicates: int = 0
    handshake_done: bool = False
    elapsed_s: float = 0.0
    error: Exception | None = None

    @classmethod
    def from_session(
        cls,
        session: Session,
        variant: Variant,
        error: Exception | None = None,
    ) -> "TransferResult":
        """Build a result from the final state of a session."""
        return cls(
            success=error is None,
            role=session.role,
            variant=variant,
            blocks=session.blocks,
            bytes_transferred=session.bytes_transferred,
            retries=session.retries,
            duplicates=session.duplicates,
            handshake_done=session.handshake_done,
            elapsed_s=session.elapsed_s,
            error=error,
        )

    def throughput_baud(self, bits_per_byte: int = 10) -> float:
        """Compute payload throughput in baud (bits/second).

        Args:
            bits_per_byte: Bits per byte including start/stop (default 10 for 8N1).

        Returns:
            Throughput in baud, or 0 if duration is 0.
        """
        if self.elapsed_s <= 0:
            return 0.0
        return (self.bytes_transferred / self.elapsed_s) * bits_per_byte

    def throughput_kbps(self) -> float:
        """Compute payload throughput in Kbps, or 0 if duration is 0."""
        if self.elapsed_s <= 0:
            return 0.0
        return (self.bytes_transferred * 8 / self.elapsed_s) / 1000

    @property
    def exit_code(self) -> ExitCode:
        """Map the outcome to a process exit code."""
        if self.success:
            return ExitCode.SUCCESS
        if isinstance(self.error, TransferInterruptedError):
            return ExitCode.CANCELLED
        if isinstance(self.error, TransferTimeoutError) and not self.handshake_done:
            return ExitCode.HANDSHAKE_FAILED
        return ExitCode.TRANSFER_FAILED
