"""Block checksum strategies for serial-modem.

Contains:
- ChecksumStrategy Protocol
- SumChecksum: 1-byte additive checksum (basic XModem)
- Crc16Checksum: 2-byte CRC-16/XMODEM, big-endian (XModem-CRC, YModem)
- select_checksum: pick the strategy negotiated at handshake
"""

import binascii
from typing import Protocol


class ChecksumStrategy(Protocol):
    """Protocol for block checksum algorithms."""

    name: str
    size: int

    def append(self, block: bytes) -> bytes: ...
    def verify(self, block: bytes, trailer: bytes) -> bool: ...


class SumChecksum:
    """8-bit arithmetic sum of the payload."""

    name = "checksum"
    size = 1

    def compute(self, block: bytes) -> bytes:
        return bytes([sum(block) & 0xFF])

    def append(self, block: bytes) -> bytes:
        return block + self.compute(block)

    def verify(self, block: bytes, trailer: bytes) -> bool:
        return trailer == self.compute(block)


class Crc16Checksum:
    """CRC-16/XMODEM (poly 0x1021, init 0) sent high byte first."""

    name = "CRC-16"
    size = 2

    def compute(self, block: bytes) -> bytes:
        return binascii.crc_hqx(block, 0).to_bytes(self.size, "big")

    def append(self, block: bytes) -> bytes:
        return block + self.compute(block)

    def verify(self, block: bytes, trailer: bytes) -> bool:
        return trailer == self.compute(block)


def select_checksum(use_crc16: bool) -> ChecksumStrategy:
    """Return the strategy for the negotiated checksum mode."""
    if use_crc16:
        return Crc16Checksum()
    return SumChecksum()
