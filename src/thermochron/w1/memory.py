from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from .channel import Channel
from .errors import ChannelError
from .frames import COMMAND_PREFIX_SIZE, PAGE_FRAME_SIZE, read_memory_frame, verify_page

logger = logging.getLogger(__name__)


def reset(channel: Channel) -> None:
    """Zero-length write; the w1 master issues a bus reset and the device stops streaming."""

    channel.write(b"")


@contextmanager
def transaction(channel: Channel, command: bytes) -> Iterator[Channel]:
    """
    Send *command* and yield the channel for reading its response.

    The bus reset always follows, whatever happens inside the block. When the
    block already failed, a failing reset is only logged so the original
    error reaches the caller.
    """

    try:
        channel.write(command)
        yield channel
    except BaseException:
        try:
            reset(channel)
        except OSError as exc:
            logger.warning("Bus reset after failed transaction also failed: %s", exc)
        raise
    else:
        reset(channel)


def read_exact(channel: Channel, count: int) -> bytes:
    data = channel.read(count)
    if len(data) != count:
        raise ChannelError(f"Short read: expected {count} bytes, got {len(data)}")
    return bytes(data)


def read_memory(channel: Channel, address: int, pages: int) -> bytes:
    if pages < 1:
        raise ValueError(f"Page count must be positive, got {pages}")
    command = read_memory_frame(address)
    block = bytearray()
    logger.debug("Reading %d page(s) from 0x%04X", pages, address)
    with transaction(channel, command):
        prefix = command[:COMMAND_PREFIX_SIZE]
        for page in range(pages):
            frame = read_exact(channel, PAGE_FRAME_SIZE)
            block.extend(verify_page(frame, prefix, page=page))
            prefix = b""
    return bytes(block)
