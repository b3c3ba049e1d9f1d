"""Block framing for serial-modem.

Wire layout of a data block:
  [header][seq][0xFF - seq][payload: 128 or 1024 bytes][checksum: 1 or 2 bytes]

The header byte is SOH for 128-byte payloads and STX for 1024-byte payloads.
Short payloads are padded with CPMEOF; the receiver cannot tell padding from
data, so received files are always a whole number of blocks long.
"""

from enum import Enum, auto

from common.checksum import ChecksumStrategy
from common.protocol import LONG_BLOCK_SIZE, SHORT_BLOCK_SIZE, ControlByte


class BlockResult(Enum):
    """Outcome of reading one block on the receiver side."""

    ACCEPTED = auto()  # Expected sequence, checksum OK
    REPEATED = auto()  # Previous sequence again (our ACK was lost)
    INVALID = auto()  # Bad complement or checksum
    TIMEOUT = auto()  # Block did not arrive in full within the deadline
    SYNC_LOST = auto()  # Sequence is neither current nor previous


BLOCK_START_BYTES = frozenset({ControlByte.SOH, ControlByte.STX})


def header_for_size(block_size: int) -> ControlByte:
    """Return the header byte announcing a payload of block_size bytes."""
    if block_size == SHORT_BLOCK_SIZE:
        return ControlByte.SOH
    if block_size == LONG_BLOCK_SIZE:
        return ControlByte.STX
    raise ValueError(f"Unsupported block size: {block_size}")


def size_for_header(header: int) -> int:
    """Return the payload size announced by a header byte."""
    if header == ControlByte.SOH:
        return SHORT_BLOCK_SIZE
    if header == ControlByte.STX:
        return LONG_BLOCK_SIZE
    raise ValueError(f"Not a block header: 0x{header:02x}")


def complement(sequence: int) -> int:
    return 0xFF - (sequence & 0xFF)


def pad_payload(data: bytes, block_size: int) -> bytes:
    """Pad data with CPMEOF up to block_size."""
    if len(data) > block_size:
        raise ValueError(f"Payload of {len(data)} bytes exceeds block size {block_size}")
    return data + bytes([ControlByte.CPMEOF]) * (block_size - len(data))


def encode_block(sequence: int, data: bytes, block_size: int, checksum: ChecksumStrategy) -> bytes:
    """Frame one block: header, sequence, complement, padded payload, checksum."""
    seq = sequence & 0xFF
    head = bytes([header_for_size(block_size), seq, complement(seq)])
    return head + checksum.append(pad_payload(data, block_size))
