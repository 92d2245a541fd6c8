"""Seeded pseudorandom number generator based on the wyrand algorithm.

The generator is used for two things only: DevNonces for join requests and
random channel selection for uplinks. Neither needs cryptographic strength,
only a uniform distribution and a low chance of collision.
"""

from __future__ import annotations

_MASK64 = (1 << 64) - 1
_MASK32 = (1 << 32) - 1
_WY_CONST_0 = 0x2D358DCCAA6C78A5
_WY_CONST_1 = 0x8BB84B93962EACC9


class Prng:
    """Wyrand pseudorandom generator seeded with an unsigned 64-bit integer."""

    def __init__(self, seed: int) -> None:
        if not 0 <= seed <= _MASK64:
            raise ValueError(f"seed must fit in an unsigned 64-bit integer, got {seed}")
        self._state = seed

    def __repr__(self) -> str:
        return f"{type(self).__name__}(state={self._state:#018x})"

    def next_u64(self) -> int:
        """Return the next unsigned 64-bit value."""
        state = (self._state + _WY_CONST_0) & _MASK64
        self._state = state
        product = state * (state ^ _WY_CONST_1)
        return (product & _MASK64) ^ (product >> 64)

    def next_u32(self) -> int:
        """Return the next unsigned 32-bit value (low half of a 64-bit draw)."""
        return self.next_u64() & _MASK32

    def random_bytes(self, length: int) -> bytes:
        """Return ``length`` random bytes.

        Whole 8-byte chunks come from 64-bit draws in little-endian order; a
        tail of more than four bytes uses one more 64-bit draw, a shorter tail
        a 32-bit draw.
        """
        if length < 0:
            raise ValueError(f"length must not be negative, got {length}")
        out = bytearray()
        full_chunks, rest = divmod(length, 8)
        for _ in range(full_chunks):
            out += self.next_u64().to_bytes(8, "little")
        if rest > 4:
            out += self.next_u64().to_bytes(8, "little")[:rest]
        elif rest:
            out += self.next_u32().to_bytes(4, "little")[:rest]
        return bytes(out)