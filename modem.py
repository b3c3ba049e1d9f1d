"""XModem / XModem-1K / XModem-CRC / YModem transfer engine.

YModem support is limited: block 0 (file name, size) is never sent, and a
block 0 from a YModem sender is acknowledged and skipped like a repeated
block. Data always starts at block 1.

Example:
    with open_serial("/dev/ttyUSB0", 115200) as ser:
        Modem(ser).send_file(Path("firmware.bin"), use_1k_blocks=True)
"""

import logging
import threading
from pathlib import Path
from typing import BinaryIO

from common.protocol import LONG_BLOCK_SIZE, SHORT_BLOCK_SIZE, ByteChannel
from common.checksum import select_checksum
from common.io import drain_input
from common.transfer import Role, Session, Timings
from receiver.handshake import request_transmission_start
from receiver.transfer import process_data_blocks
from sender.handshake import wait_receiver_request
from sender.transfer import send_stream

logger = logging.getLogger(__name__)


class Modem:
    """Runs transfers over a pre-connected byte channel.

    Each send/receive call owns a fresh Session; nothing carries over
    between calls. Setting the cancel event makes a running call send CAN
    to the peer and raise TransferInterruptedError.
    """

    def __init__(
        self,
        port: ByteChannel,
        timings: Timings | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        self.port = port
        self.timings = timings or Timings()
        self.cancel = cancel
        # Session of the most recent call, kept for reporting after failures
        self.last_session: Session | None = None

    def _new_session(self, role: Role) -> Session:
        self.last_session = Session(role=role, timings=self.timings, cancel=self.cancel)
        return self.last_session

    def send(self, source: BinaryIO, use_1k_blocks: bool = False) -> Session:
        """Send the contents of source. Raises TransferError on failure."""
        session = self._new_session(Role.SENDER)
        session.block_size = LONG_BLOCK_SIZE if use_1k_blocks else SHORT_BLOCK_SIZE
        session.checksum = wait_receiver_request(self.port, session)
        session.handshake_done = True

        send_stream(self.port, session, source)
        logger.info(
            f"Sender: transfer complete ({session.blocks} blocks, "
            f"{session.bytes_transferred} bytes, {session.retries} retries)"
        )
        return session

    def receive(self, destination: BinaryIO, use_crc16: bool = True) -> Session:
        """Receive into destination. Raises TransferError on failure.

        Accepted blocks are written as they arrive, so destination may hold a
        prefix of the data if the transfer fails.
        """
        session = self._new_session(Role.RECEIVER)
        drain_input(self.port)

        character = request_transmission_start(self.port, session, use_crc16)
        session.checksum = select_checksum(use_crc16)
        session.handshake_done = True

        process_data_blocks(self.port, session, character, destination)
        return session

    def send_file(self, path: Path, use_1k_blocks: bool = False) -> Session:
        with open(path, "rb") as source:
            return self.send(source, use_1k_blocks)

    def receive_file(self, path: Path, use_crc16: bool = True) -> Session:
        with open(path, "wb") as destination:
            return self.receive(destination, use_crc16)
