"""Primitives - Field constants and symbol packing."""

from primitives.field import (
    BN254_BASE_ORDER,
    BN254_SCALAR_ORDER,
    FR,
    fr_from_word,
    fr_vector,
)
from primitives.packing import (
    OPERATION_RADIX,
    PIECE_RADIX,
    RadixProfile,
    pack,
    unpack,
)

__all__ = [
    # Field
    "FR",
    "BN254_SCALAR_ORDER",
    "BN254_BASE_ORDER",
    "fr_from_word",
    "fr_vector",
    # Packing
    "RadixProfile",
    "OPERATION_RADIX",
    "PIECE_RADIX",
    "pack",
    "unpack",
]
