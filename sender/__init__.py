"""Sender package for serial-modem.

Contains sender-side handshake and block loop:
- handshake: wait_receiver_request
- transfer: send_block, send_eot, send_stream

Note: run_sender is not exported here to avoid circular imports with modem.
Import directly from sender.runner when needed.
"""

from sender.handshake import wait_receiver_request
from sender.transfer import send_block, send_eot, send_stream

__all__ = [
    "wait_receiver_request",
    "send_block",
    "send_eot",
    "send_stream",
]
