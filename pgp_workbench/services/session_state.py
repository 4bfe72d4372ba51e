"""
Secure session state.

Holds the live, mutable state of one workflow. Every text value is kept in a
SecureBuffer so that it can be overwritten on teardown instead of waiting for
the garbage collector.
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from types import MappingProxyType
from typing import Self

import structlog

from pgp_workbench.crypto.secure_buffer import SecureBuffer
from pgp_workbench.exceptions import UnknownFieldError
from pgp_workbench.models.errors import ClassifiedError
from pgp_workbench.models.keys import KeyInfo
from pgp_workbench.models.workflow import VerificationResult

logger = structlog.get_logger(__name__)


class SecureSession:
    """
    Wipeable container for a workflow's fields, output and results.

    Example:
        with SecureSession(["private_key", "passphrase"]) as session:
            session.set("passphrase", "secret")
            with session.borrow("passphrase") as (passphrase,):
                backend_call(passphrase)
        # every buffer is zeroed here
    """

    def __init__(self, field_names: Iterable[str]) -> None:
        self._fields: dict[str, SecureBuffer] = {name: SecureBuffer() for name in field_names}
        self._output: SecureBuffer | None = None
        self.derived_key_info: KeyInfo | None = None
        self.verification: VerificationResult | None = None
        self.last_error: ClassifiedError | None = None
        self.is_busy = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: object) -> None:
        self.wipe()

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(self._fields)

    def set(self, name: str, value: str) -> None:
        """Replace a field's value, wiping the previous buffer."""
        previous = self._buffer(name)
        self._fields[name] = SecureBuffer.from_text(value)
        previous.wipe()

    def get(self, name: str) -> str:
        """Decoded copy of a field. The returned string is not wiped."""
        buffer = self._buffer(name)
        return "" if buffer.is_wiped else buffer.text

    def is_blank(self, name: str) -> bool:
        return self._buffer(name).is_blank()

    def is_empty(self, name: str) -> bool:
        """True when the field holds no bytes at all. Whitespace counts as content."""
        return not self._buffer(name)

    @contextmanager
    def borrow(self, *names: str) -> Iterator[tuple[SecureBuffer, ...]]:
        """
        Lend independent copies of fields.

        The copies are wiped when the block exits, on every exit path.
        """
        copies: list[SecureBuffer] = []
        try:
            for name in names:
                copies.append(self._buffer(name).copy())
            yield tuple(copies)
        finally:
            for copy in copies:
                copy.wipe()

    @property
    def output(self) -> str | None:
        if self._output is None or self._output.is_wiped:
            return None
        return self._output.text

    @output.setter
    def output(self, value: str | None) -> None:
        if self._output is not None:
            self._output.wipe()
        self._output = None if value is None else SecureBuffer.from_text(value)

    def clear_results(self) -> None:
        """Drop output, verification result and error; keep fields."""
        self.output = None
        self.verification = None
        self.last_error = None

    def snapshot_fields(self) -> MappingProxyType[str, str]:
        return MappingProxyType({name: self.get(name) for name in self._fields})

    def wipe(self) -> None:
        """Overwrite every buffer and drop every derived value."""
        for name, buffer in self._fields.items():
            buffer.wipe()
            self._fields[name] = SecureBuffer()
        self.clear_results()
        self.derived_key_info = None
        logger.debug("Session wiped", fields=len(self._fields))

    def _buffer(self, name: str) -> SecureBuffer:
        try:
            return self._fields[name]
        except KeyError:
            msg = f"Unknown field: {name}"
            raise UnknownFieldError(msg, field=name) from None
