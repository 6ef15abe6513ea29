"""Scrubbable in-memory container for secret text.

Everything read from a credentials file, every seed and token extracted from
it, and every encoded signature lives in a `SecretBuffer`. The storage is a
mutable `bytearray` that is overwritten in place before it is dropped, so the
secret does not linger in freed memory. Python may still hold transient copies
(for example the `bytes` handed to the signing library); this is best-effort.
"""

from __future__ import annotations

import hmac
import re
from collections.abc import Iterator
from os import PathLike
from typing import Any, NoReturn

from nats_creds.core.settings import settings

_WHITESPACE = b" \t\r\n\x0b\x0c"


def _scrub(storage: bytearray, fill: int) -> None:
    """Overwrite `storage` in place without changing its size."""
    storage[:] = bytes((fill,)) * len(storage)


class SecretBuffer:
    """Owned byte buffer that is scrubbed when released.

    The buffer is wiped by `wipe()`, on leaving a `with` block, when it is
    garbage collected, and (for the old storage) whenever `extend()` grows it.
    It never renders its contents through `repr`/`str`, refuses to be pickled
    or copied, and compares in constant time. Explicit copies are available
    through `slice()`, `reveal()` and `reveal_bytes()`.

    Usage:
        with SecretBuffer.from_file("user.creds") as contents:
            token, key_pair = parser.parse_combined(contents)
    """

    __slots__ = ("_buf", "_fill", "_wiped")

    def __init__(
        self,
        data: bytes | bytearray | memoryview | str = b"",
        *,
        fill: int | None = None,
        take: bool = False,
    ) -> None:
        """Create a buffer holding a copy of `data`.

        Args:
            data: Initial contents; `str` is encoded as UTF-8.
            fill: Byte written over released storage (default: settings.scrub_byte).
            take: Adopt a `bytearray` argument as the backing storage instead of
                copying it, so the caller's array is scrubbed along with the buffer.
        """
        self._fill = settings.scrub_byte if fill is None else fill
        self._wiped = False
        if isinstance(data, str):
            self._buf = bytearray(data.encode("utf-8"))
        elif take and isinstance(data, bytearray):
            self._buf = data
        elif isinstance(data, (bytes, bytearray, memoryview)):
            self._buf = bytearray(data)
        else:
            raise TypeError(f"SecretBuffer cannot hold {type(data).__name__}")

    @classmethod
    def from_file(cls, path: str | PathLike[str]) -> SecretBuffer:
        """Read a whole file into a new buffer.

        The file is read through a scratch chunk that is scrubbed afterwards.
        I/O errors propagate unchanged; the partially filled buffer is wiped.
        """
        buffer = cls()
        chunk = bytearray(settings.read_chunk_size)
        try:
            with open(path, "rb") as handle:
                while True:
                    read = handle.readinto(chunk)
                    if not read:
                        break
                    with memoryview(chunk) as view, view[:read] as part:
                        buffer.extend(part)
        except BaseException:
            buffer.wipe()
            raise
        finally:
            _scrub(chunk, buffer._fill)
        return buffer

    @property
    def wiped(self) -> bool:
        """True once the buffer has been scrubbed and released."""
        return self._wiped

    def extend(self, data: bytes | bytearray | memoryview) -> None:
        """Append `data`, scrubbing the storage that is being replaced."""
        grown = bytearray(len(self._buf) + len(data))
        grown[: len(self._buf)] = self._buf
        grown[len(self._buf) :] = data
        _scrub(self._buf, self._fill)
        self._buf = grown

    def line_spans(self) -> Iterator[tuple[int, int]]:
        """Yield `(start, end)` offsets of each line, surrounding whitespace trimmed."""
        buf = self._buf
        size = len(buf)
        start = 0
        while start <= size:
            end = buf.find(b"\n", start)
            if end == -1:
                end = size
            low, high = start, end
            while low < high and buf[low] in _WHITESPACE:
                low += 1
            while high > low and buf[high - 1] in _WHITESPACE:
                high -= 1
            yield low, high
            start = end + 1

    def startswith(self, prefixes: bytes | tuple[bytes, ...], start: int = 0, end: int | None = None) -> bool:
        """Return True if the `[start:end]` region begins with one of `prefixes`."""
        if end is None:
            end = len(self._buf)
        return self._buf.startswith(prefixes, start, end)

    def finditer(self, pattern: re.Pattern[bytes]) -> Iterator[re.Match[bytes]]:
        """Run a compiled bytes pattern over the buffer without copying it."""
        return pattern.finditer(self._buf)

    def slice(self, start: int, end: int) -> SecretBuffer:
        """Return a new buffer owning a copy of `[start:end]`."""
        return SecretBuffer(self._buf[start:end], fill=self._fill, take=True)

    def reveal(self) -> str:
        """Return the contents as text. The returned `str` cannot be scrubbed."""
        return self._buf.decode("utf-8")

    def reveal_bytes(self) -> bytes:
        """Return the contents as `bytes`. The returned copy cannot be scrubbed."""
        return bytes(self._buf)

    def wipe(self) -> None:
        """Overwrite the storage with the fill byte and release it."""
        storage = getattr(self, "_buf", None)
        if storage is None:
            return
        _scrub(storage, self._fill)
        self._buf = bytearray()
        self._wiped = True

    def __enter__(self) -> SecretBuffer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.wipe()

    def __del__(self) -> None:
        self.wipe()

    def __len__(self) -> int:
        return len(self._buf)

    def __bool__(self) -> bool:
        return bool(self._buf)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SecretBuffer):
            return hmac.compare_digest(self._buf, other._buf)
        if isinstance(other, str):
            return hmac.compare_digest(self._buf, other.encode("utf-8"))
        if isinstance(other, (bytes, bytearray)):
            return hmac.compare_digest(self._buf, other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else "redacted"
        return f"SecretBuffer(<{state}>)"

    __str__ = __repr__

    def __reduce_ex__(self, protocol: Any) -> NoReturn:
        raise TypeError("SecretBuffer cannot be pickled")

    def __copy__(self) -> NoReturn:
        raise TypeError("SecretBuffer cannot be copied implicitly; use slice()")

    def __deepcopy__(self, memo: Any) -> NoReturn:
        raise TypeError("SecretBuffer cannot be copied implicitly; use slice()")
