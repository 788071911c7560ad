from __future__ import annotations


class W1Error(Exception):
    """Base class for errors raised while talking to an iButton."""


class ChannelError(W1Error, OSError):
    """The byte channel returned less data than the protocol requires."""


class ChecksumFault(W1Error, ValueError):
    def __init__(self, page: int, expected: int, actual: int) -> None:
        super().__init__(
            f"CRC mismatch on page {page} (expected=0x{expected:04X}, actual=0x{actual:04X})"
        )
        self.page = page
        self.expected = expected
        self.actual = actual


class CalibrationUndefined(W1Error):
    """No temperature correction can be derived for this device."""


class DeviceNotFound(W1Error):
    pass


class MultipleDevices(DeviceNotFound):
    pass
