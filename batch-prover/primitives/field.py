"""BN254 scalar field Fr and base field constants.

Uses galois for scalar field arithmetic. FR is the field public inputs live in.
Proof coordinates live in the base field Fq; they are only carried as
canonical residues here, never operated on, so Fq has no galois type.

FR is built with an explicit primitive element and verify=False to skip the
factorisation of r - 1 that galois would otherwise run at import time.
"""

import galois
from typing import Iterable, List

# --- Field Construction ---

BN254_SCALAR_ORDER = 21888242871839275222246405745257275088548364400416034343698204186575808495617
BN254_BASE_ORDER = 21888242871839275222246405745257275088696311157297823662689037894645226208583

# Multiplicative generator of Fr* (same value circom/gnark use)
_FR_GENERATOR = 5

FR = galois.GF(BN254_SCALAR_ORDER, primitive_element=_FR_GENERATOR, verify=False)
"""Scalar field GF(r) of the BN254 curve."""

# --- Scalar Field Conversion ---

def fr_from_word(value: int) -> FR:
    """Map a 256-bit word to Fr by reduction modulo r.

    Words >= r are reduced, not rejected. This mirrors from_be_bytes_mod_order
    in the proving system, so a word equal to r maps to zero.
    """
    if value < 0:
        raise ValueError(f"word must be non-negative, got {value}")
    return FR(value % BN254_SCALAR_ORDER)


def fr_vector(words: Iterable[int]) -> FR:
    """Reduce a sequence of words into a 1-D FR array."""
    return FR([w % BN254_SCALAR_ORDER for w in words])


def fr_to_words(values) -> List[int]:
    """Canonical integer residues of an FR array (or list of FR scalars)."""
    return [int(v) for v in values]


# --- Base Field Residues ---

def check_base_residue(value: int) -> int:
    """Return value unchanged if it is a canonical Fq residue, else raise."""
    if not 0 <= value < BN254_BASE_ORDER:
        raise ValueError(f"not a canonical base field element: {value}")
    return value
