"""Receiver package for serial-modem.

Contains receiver-side handshake and block loop:
- handshake: request_transmission_start
- transfer: read_block, read_next_block_start, process_data_blocks

Note: run_receiver is not exported here to avoid circular imports with modem.
Import directly from receiver.runner when needed.
"""

from receiver.handshake import request_transmission_start
from receiver.transfer import process_data_blocks, read_block, read_next_block_start

__all__ = [
    "request_transmission_start",
    "read_block",
    "read_next_block_start",
    "process_data_blocks",
]
