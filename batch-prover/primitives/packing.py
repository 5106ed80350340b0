"""Fixed-radix symbol packing.

A sequence of small symbols v[0..n) is folded into one integer as
sum(v[i] * radix**i). Unpacking reads the integer back in little-endian groups
of bit_width bits, which only inverts pack when radix == 2**bit_width.
RadixProfile carries both numbers together so the two can never disagree.
"""

from dataclasses import dataclass
from typing import List, Sequence, Union

import numpy as np


# --- Radix Profile ---

@dataclass(frozen=True)
class RadixProfile:
    """Power-of-two radix paired with its bit width."""
    radix: int
    bit_width: int

    def __post_init__(self) -> None:
        if self.bit_width < 1:
            raise ValueError(f"bit_width must be >= 1, got {self.bit_width}")
        if self.radix != 1 << self.bit_width:
            raise ValueError(
                f"radix {self.radix} does not match bit_width {self.bit_width} "
                f"(expected {1 << self.bit_width})"
            )

    @classmethod
    def from_bit_width(cls, bit_width: int) -> "RadixProfile":
        return cls(1 << bit_width, bit_width)

    def capacity(self, length: int) -> int:
        """Exclusive upper bound of packed values for `length` symbols."""
        return 1 << (self.bit_width * length)

    def pack(self, symbols: Sequence[int]) -> int:
        return pack(symbols, self)

    def unpack(self, value: int, length: int) -> List[int]:
        return unpack(value, self, length)


# Move codes: 4 values, 2 bits each
OPERATION_RADIX = RadixProfile(4, 2)

# Piece positions: 64 values, 6 bits each
PIECE_RADIX = RadixProfile(64, 6)


# --- Pack / Unpack ---

def pack(symbols: Sequence[int], base: Union[int, RadixProfile]) -> int:
    """Positional encoding sum(symbols[i] * base**i).

    No range check is done here. A symbol >= base aliases into higher
    positions; callers validate ranges first.
    """
    radix = base.radix if isinstance(base, RadixProfile) else int(base)

    packed = 0
    factor = 1
    for v in symbols:
        packed += int(v) * factor
        factor *= radix
    return packed


def unpack(value: int, bit: Union[int, RadixProfile], length: int) -> List[int]:
    """Split value into little-endian groups of `bit` bits, zero-padded to length.

    Raises ValueError if value is negative or needs more than `length` groups.
    """
    bit_width = bit.bit_width if isinstance(bit, RadixProfile) else int(bit)
    if bit_width < 1:
        raise ValueError(f"bit width must be >= 1, got {bit_width}")
    if value < 0:
        raise ValueError(f"cannot unpack negative value {value}")
    if value >> (bit_width * length):
        raise ValueError(
            f"value needs more than {length} symbols of {bit_width} bits"
        )
    if length == 0:
        return []

    n_bits = bit_width * length
    raw = np.frombuffer(value.to_bytes((n_bits + 7) // 8, "little"), dtype=np.uint8)
    bits = np.unpackbits(raw, bitorder="little")[:n_bits]

    groups = bits.reshape(length, bit_width).astype(np.int64)
    weights = np.left_shift(1, np.arange(bit_width, dtype=np.int64))
    return [int(s) for s in groups @ weights]
