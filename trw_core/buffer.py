"""
Buffer - Owned byte storage for rewriting pipelines

A Buffer is a bytearray allocation (its capacity) plus a logical length. Rewriters
take ownership of the buffers handed to them with ``Buffer.take()``; the handle
the caller held is released, and any further use of it raises
``BufferReleasedError``.

Growth policy is shared by every operation through ``ensure_capacity``: reuse the
spare when it is large enough, otherwise grow it to the needed size plus 20%.
Only the empty placeholder spare is ever replaced by a fresh allocation.

Author: TRW maintainers | 2026-10-18
"""

import logging
from typing import Optional, Union

from .errors import BufferReleasedError

logger = logging.getLogger(__name__)

# Headroom added on allocation, as a fraction num/den of the needed size
GROWTH_NUMERATOR = 1
GROWTH_DENOMINATOR = 5

BytesLike = Union[bytes, bytearray, memoryview]


def grown_capacity(needed: int) -> int:
    """Return ``ceil(needed * 1.2)`` using integer arithmetic."""
    extra = -(-needed * GROWTH_NUMERATOR // GROWTH_DENOMINATOR)
    return needed + extra


class Buffer:
    """
    Mutable, contiguous byte storage with a logical length <= capacity.

    Only the first ``len(buffer)`` bytes of ``buffer.data`` are meaningful;
    the rest is spare capacity with unspecified content.
    """

    __slots__ = ("_data", "_length")

    def __init__(self, data: Optional[bytearray] = None, length: Optional[int] = None):
        if data is None:
            data = bytearray()
        if length is None:
            length = len(data)
        if not 0 <= length <= len(data):
            raise ValueError(f"length {length} outside of capacity {len(data)}")
        self._data: Optional[bytearray] = data
        self._length = length

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def allocate(cls, capacity: int) -> "Buffer":
        """Allocate a new, empty buffer able to hold ``capacity`` bytes."""
        logger.debug(f"Allocating buffer of {capacity} bytes")
        return cls(bytearray(capacity), 0)

    @classmethod
    def from_bytes(cls, content: BytesLike) -> "Buffer":
        """Create a buffer holding a private copy of ``content``."""
        return cls(bytearray(content))

    @classmethod
    def empty(cls) -> "Buffer":
        """Spare placeholder: no content and no capacity."""
        return cls(bytearray(), 0)

    # -------------------------------------------------------------------------
    # Ownership
    # -------------------------------------------------------------------------

    def take(self) -> "Buffer":
        """Move the storage into a new handle and release this one."""
        moved = Buffer(self.data, self._length)
        self._data = None
        return moved

    @property
    def released(self) -> bool:
        return self._data is None

    @property
    def data(self) -> bytearray:
        """Underlying storage (valid up to ``len(self)``)."""
        if self._data is None:
            raise BufferReleasedError("buffer ownership was transferred; this handle is no longer usable")
        return self._data

    # -------------------------------------------------------------------------
    # Size management
    # -------------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return len(self.data)

    def __len__(self) -> int:
        if self._data is None:
            raise BufferReleasedError("buffer ownership was transferred; this handle is no longer usable")
        return self._length

    def reset(self) -> None:
        """Drop the logical content, keeping the capacity."""
        self.truncate(0)

    def truncate(self, size: int) -> None:
        if not 0 <= size <= self.capacity:
            raise ValueError(f"cannot truncate to {size} bytes (capacity {self.capacity})")
        self._length = size

    def reserve(self, needed: int) -> None:
        """Extend the storage in place so that it can hold ``needed`` bytes."""
        data = self.data
        if needed > len(data):
            new_capacity = grown_capacity(needed)
            logger.debug(f"Growing buffer from {len(data)} to {new_capacity} bytes")
            data.extend(bytes(new_capacity - len(data)))

    def append(self, chunk: BytesLike) -> None:
        """Write ``chunk`` after the logical content, growing when needed."""
        size = len(chunk)
        if not size:
            return
        end = self._length + size
        self.reserve(end)
        self._data[self._length:end] = chunk
        self._length = end

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    def getvalue(self) -> bytes:
        """Copy of the logical content."""
        with memoryview(self.data) as view:
            return view[:self._length].tobytes()

    def __bytes__(self) -> bytes:
        return self.getvalue()

    def __repr__(self) -> str:
        if self._data is None:
            return "Buffer(<released>)"
        return f"Buffer(length={self._length}, capacity={len(self._data)})"


def ensure_capacity(spare: Buffer, needed: int) -> Buffer:
    """
    Get an empty destination buffer able to hold ``needed`` bytes.

    The spare is reused when its capacity is sufficient and grown in place to
    ``ceil(needed * 1.2)`` bytes when it is not, so that later stages of a
    pipeline find some headroom. Only a spare without any storage (the empty
    placeholder a pipeline starts with) is replaced by a new allocation.

    Args:
        spare: Buffer whose ownership is handed over (content is ignored)
        needed: Number of bytes the destination must hold

    Returns:
        Buffer with ``len() == 0`` and ``capacity >= needed``
    """
    spare = spare.take()
    spare.reset()
    if spare.capacity >= needed:
        return spare

    if not spare.capacity:
        return Buffer.allocate(grown_capacity(needed))

    logger.debug(f"Spare of {spare.capacity} bytes too small for {needed}, growing in place")
    spare.reserve(needed)
    return spare
