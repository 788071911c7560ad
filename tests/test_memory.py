from __future__ import annotations

import pytest

from thermochron.w1.errors import ChannelError, ChecksumFault
from thermochron.w1.memory import read_memory, transaction
from w1_fakes import FakeChannel, page_frames


def _payload(pages: int) -> bytes:
    return bytes((index * 7) & 0xFF for index in range(pages * 32))


def _prefix(address: int) -> bytes:
    return bytes([0x69]) + address.to_bytes(2, "little")


def test_read_single_page() -> None:
    data = _payload(1)
    channel = FakeChannel(page_frames(data, _prefix(0x0200)))
    assert read_memory(channel, 0x0200, 1) == data
    assert channel.writes[0] == bytes([0x69, 0x00, 0x02]) + bytes(8)
    assert channel.writes[-1] == b""
    assert channel.resets == 1


def test_read_multiple_pages_concatenates_in_order() -> None:
    data = _payload(3)
    channel = FakeChannel(page_frames(data, _prefix(0x1000)))
    block = read_memory(channel, 0x1000, 3)
    assert block == data
    assert len(block) == 0x60
    assert channel.writes == [bytes([0x69, 0x00, 0x10]) + bytes(8), b""]


def test_checksum_fault_on_later_page_aborts_and_resets() -> None:
    frames = page_frames(_payload(3), _prefix(0x1000))
    corrupted = bytearray(frames[1])
    corrupted[0] ^= 0xFF
    frames[1] = bytes(corrupted)
    channel = FakeChannel(frames)
    with pytest.raises(ChecksumFault) as excinfo:
        read_memory(channel, 0x1000, 3)
    assert excinfo.value.page == 1
    assert channel.resets == 1
    assert channel.writes[-1] == b""


def test_first_page_checked_against_command_prefix() -> None:
    # Frames built for a different address fail the first-page check.
    channel = FakeChannel(page_frames(_payload(1), _prefix(0x0240)))
    with pytest.raises(ChecksumFault):
        read_memory(channel, 0x0200, 1)
    assert channel.resets == 1


def test_channel_error_propagates_verbatim() -> None:
    error = OSError(5, "Input/output error")
    frames = page_frames(_payload(2), _prefix(0x1000))
    channel = FakeChannel([frames[0], error])
    with pytest.raises(OSError) as excinfo:
        read_memory(channel, 0x1000, 2)
    assert excinfo.value is error
    assert channel.resets == 1


def test_short_read_is_channel_error() -> None:
    channel = FakeChannel([bytes(20)])
    with pytest.raises(ChannelError):
        read_memory(channel, 0x0200, 1)
    assert channel.resets == 1


def test_failed_reset_does_not_mask_original_error() -> None:
    frames = page_frames(_payload(1), b"")
    channel = FakeChannel(frames, fail_reset=True)
    with pytest.raises(ChecksumFault):
        read_memory(channel, 0x0200, 1)


def test_failed_reset_after_success_is_reported() -> None:
    channel = FakeChannel(page_frames(_payload(1), _prefix(0x0200)), fail_reset=True)
    with pytest.raises(OSError, match="reset failed"):
        read_memory(channel, 0x0200, 1)


def test_page_count_must_be_positive() -> None:
    channel = FakeChannel()
    with pytest.raises(ValueError):
        read_memory(channel, 0x0200, 0)
    assert channel.writes == []


def test_transaction_resets_when_command_write_fails() -> None:
    class BrokenChannel(FakeChannel):
        def write(self, data: bytes) -> None:
            if data:
                raise OSError("write failed")
            super().write(data)

    channel = BrokenChannel()
    with pytest.raises(OSError, match="write failed"):
        with transaction(channel, b"\xAA"):
            pass
    assert channel.writes == [b""]
