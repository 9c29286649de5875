"""A fixed-width multi-word integer used as a sliding bit window."""

from __future__ import annotations

_WORD = 64
_WORD_MASK = (1 << _WORD) - 1


class FixedBigInt:
    """An integer of ``n`` bits held in 64-bit words, rendered as hex."""

    def __init__(self, n: int) -> None:
        if n < 0:
            raise ValueError("bit count must not be negative")
        self.n = n
        self._chunks = max(1, (n + _WORD - 1) // _WORD)
        rem = n % _WORD
        msb_mask = _WORD_MASK if rem == 0 else (1 << (_WORD - rem)) - 1
        top_shift = (self._chunks - 1) * _WORD
        self._mask = ((1 << top_shift) - 1) | (msb_mask << top_shift)
        self._value = 0

    def lsh(self, n: int) -> None:
        """Shift left by ``n`` bits, discarding what falls off the top word's mask."""
        if n == 0:
            return
        self._value = (self._value << n) & self._mask

    def bit(self, i: int) -> int:
        """Return the ``i``-th bit, or 0 when ``i`` is outside the width."""
        if i >= self.n:
            return 0
        return (self._value >> i) & 1

    def set_bit(self, i: int) -> None:
        """Set the ``i``-th bit; indices outside the width are ignored."""
        if i >= self.n:
            return
        self._value |= 1 << i

    def __str__(self) -> str:
        return format(self._value, f"0{self._chunks * 16}X")

    def __repr__(self) -> str:
        return f"FixedBigInt(n={self.n}, value=0x{self})"