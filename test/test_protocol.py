"""Unit tests for protocol constants, checksums, block framing and the timer."""

import binascii
import time

import pytest

from common.block import (
    BlockResult,
    complement,
    encode_block,
    header_for_size,
    pad_payload,
    size_for_header,
)
from common.checksum import Crc16Checksum, SumChecksum, select_checksum
from common.protocol import LONG_BLOCK_SIZE, SHORT_BLOCK_SIZE, ControlByte, Variant
from common.timer import Timer


@pytest.mark.unit
class TestControlByte:
    """Tests for ControlByte enum."""

    def test_values(self) -> None:
        assert ControlByte.SOH == 0x01
        assert ControlByte.STX == 0x02
        assert ControlByte.EOT == 0x04
        assert ControlByte.ACK == 0x06
        assert ControlByte.NAK == 0x15
        assert ControlByte.CAN == 0x18
        assert ControlByte.CPMEOF == 0x1A
        assert ControlByte.CRC == ord("C")


@pytest.mark.unit
class TestVariant:
    """Tests for protocol variant preferences."""

    @pytest.mark.parametrize(
        "variant,use_1k,use_crc",
        [
            (Variant.XMODEM, False, False),
            (Variant.XMODEM_1K, True, True),
            (Variant.XMODEM_CRC, False, True),
            (Variant.YMODEM, True, True),
        ],
    )
    def test_preferences(self, variant: Variant, use_1k: bool, use_crc: bool) -> None:
        assert variant.use_1k_blocks is use_1k
        assert variant.use_crc16 is use_crc

    def test_lookup_by_name(self) -> None:
        assert Variant("xmodem-1k") is Variant.XMODEM_1K


@pytest.mark.unit
class TestChecksums:
    """Tests for the two checksum strategies."""

    def test_sum_wraps_at_256(self) -> None:
        block = bytes([0xFF, 0x02])
        assert SumChecksum().append(block) == block + b"\x01"

    def test_sum_verify(self) -> None:
        checksum = SumChecksum()
        block = bytes(range(128))
        trailer = checksum.append(block)[-1:]
        assert checksum.verify(block, trailer) is True
        assert checksum.verify(block, bytes([trailer[0] ^ 0x01])) is False

    def test_crc16_known_value(self) -> None:
        # CRC-16/XMODEM check value for "123456789"
        assert Crc16Checksum().append(b"123456789")[-2:] == b"\x31\xc3"

    def test_crc16_matches_binascii(self) -> None:
        block = bytes(range(256)) * 4
        expected = binascii.crc_hqx(block, 0).to_bytes(2, "big")
        assert Crc16Checksum().verify(block, expected) is True

    def test_crc16_detects_corruption(self) -> None:
        checksum = Crc16Checksum()
        block = b"A" * 128
        trailer = checksum.append(block)[-2:]
        assert checksum.verify(b"B" + block[1:], trailer) is False

    def test_sizes(self) -> None:
        assert SumChecksum().size == 1
        assert Crc16Checksum().size == 2

    def test_select_checksum(self) -> None:
        assert isinstance(select_checksum(True), Crc16Checksum)
        assert isinstance(select_checksum(False), SumChecksum)


@pytest.mark.unit
class TestBlockFraming:
    """Tests for block header, padding and encoding."""

    def test_header_for_size(self) -> None:
        assert header_for_size(SHORT_BLOCK_SIZE) == ControlByte.SOH
        assert header_for_size(LONG_BLOCK_SIZE) == ControlByte.STX

    def test_header_for_bad_size(self) -> None:
        with pytest.raises(ValueError):
            header_for_size(512)

    def test_size_for_header(self) -> None:
        assert size_for_header(ControlByte.SOH) == 128
        assert size_for_header(ControlByte.STX) == 1024
        with pytest.raises(ValueError):
            size_for_header(ControlByte.EOT)

    def test_complement(self) -> None:
        assert complement(1) == 0xFE
        assert complement(0) == 0xFF
        assert complement(256) == 0xFF

    def test_pad_payload(self) -> None:
        padded = pad_payload(b"ab", 128)
        assert len(padded) == 128
        assert padded[:2] == b"ab"
        assert padded[2:] == bytes([0x1A]) * 126

    def test_pad_payload_too_long(self) -> None:
        with pytest.raises(ValueError):
            pad_payload(b"x" * 129, 128)

    def test_encode_short_block_with_sum(self) -> None:
        frame = encode_block(1, b"hi", 128, SumChecksum())
        assert len(frame) == 3 + 128 + 1
        assert frame[:3] == b"\x01\x01\xfe"
        assert frame[-1] == sum(pad_payload(b"hi", 128)) & 0xFF

    def test_encode_long_block_with_crc(self) -> None:
        frame = encode_block(2, b"x" * 1024, 1024, Crc16Checksum())
        assert len(frame) == 3 + 1024 + 2
        assert frame[:3] == b"\x02\x02\xfd"

    def test_encode_wraps_sequence(self) -> None:
        frame = encode_block(256, b"", 128, SumChecksum())
        assert frame[1:3] == b"\x00\xff"

    def test_block_results_distinct(self) -> None:
        assert len(set(BlockResult)) == 5


@pytest.mark.unit
class TestTimer:
    """Tests for the deadline timer."""

    def test_not_started_is_expired(self) -> None:
        assert Timer(10.0).is_expired() is True

    def test_started_not_expired(self) -> None:
        assert Timer(10.0).start().is_expired() is False

    def test_expires(self) -> None:
        timer = Timer(0.02).start()
        time.sleep(0.05)
        assert timer.is_expired() is True

    def test_restart(self) -> None:
        timer = Timer(0.02).start()
        time.sleep(0.05)
        timer.start()
        assert timer.is_expired() is False
