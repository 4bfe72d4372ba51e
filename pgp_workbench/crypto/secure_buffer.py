"""Zeroable buffers for secret text (key blocks, passphrases, plaintext)."""

import ctypes
import warnings
from typing import Self

_WHITESPACE = frozenset(b" \t\r\n\x0b\x0c")


def _secure_zero(data: bytearray) -> None:
    if len(data) == 0:
        return
    try:
        view = (ctypes.c_char * len(data)).from_buffer(data)
        ctypes.memset(ctypes.addressof(view), 0, len(data))
        del view
    except Exception as exc:
        warnings.warn(f"ctypes.memset failed, using fallback: {exc}", RuntimeWarning)
        data[:] = bytes(len(data))


class SecureBuffer:
    """
    UTF-8 text held in a bytearray that is overwritten with zeros on wipe.

    Use as context manager for guaranteed cleanup. Any `str` obtained through
    `text` is an ordinary Python string and is not managed.
    """

    __slots__ = ("_data", "_wiped")

    def __init__(self, data: bytes | bytearray = b"") -> None:
        self._data = bytearray(data)
        self._wiped = False

    def __del__(self) -> None:
        self.wipe()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: object) -> None:
        self.wipe()

    @classmethod
    def from_text(cls, text: str) -> Self:
        """Create from text. Zeros the intermediate encoding."""
        encoded = bytearray(text, "utf-8")
        try:
            return cls(encoded)
        finally:
            _secure_zero(encoded)

    def wipe(self) -> None:
        """Zero memory. Idempotent."""
        if self._wiped:
            return
        _secure_zero(self._data)
        self._wiped = True

    @property
    def is_wiped(self) -> bool:
        return self._wiped

    @property
    def text(self) -> str:
        """Warning: returned string is not securely managed."""
        self._check_wiped()
        return self._data.decode("utf-8")

    def copy(self) -> "SecureBuffer":
        """Independent buffer with the same content; wiping one leaves the other intact."""
        self._check_wiped()
        return SecureBuffer(self._data)

    def is_blank(self) -> bool:
        """True when wiped, empty, or whitespace only."""
        if self._wiped:
            return True
        return all(byte in _WHITESPACE for byte in self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return not self._wiped and len(self._data) > 0

    def __repr__(self) -> str:
        if self._wiped:
            return "SecureBuffer(<wiped>)"
        return f"SecureBuffer(<{len(self._data)} bytes>)"

    def _check_wiped(self) -> None:
        if self._wiped:
            raise RuntimeError("SecureBuffer has been wiped")
