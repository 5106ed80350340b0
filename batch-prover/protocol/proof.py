"""Groth16 proof data structures and word layout."""

from dataclasses import dataclass
from typing import Any

from primitives.field import check_base_residue

# --- Type Aliases ---
Fq2 = tuple[int, int]  # (c0, c1) with value c0 + c1 * u

# Words per proof on the wire: A (2) + B (4) + C (2)
PROOF_WORDS = 8


# --- Curve Points ---

@dataclass(frozen=True)
class G1Point:
    """Affine point on G1 over Fq."""
    x: int
    y: int

    def __post_init__(self) -> None:
        check_base_residue(self.x)
        check_base_residue(self.y)


@dataclass(frozen=True)
class G2Point:
    """Affine point on G2 over Fq2, coordinates as (c0, c1)."""
    x: Fq2
    y: Fq2

    def __post_init__(self) -> None:
        for c in (*self.x, *self.y):
            check_base_residue(c)


@dataclass(frozen=True)
class Groth16Proof:
    """Groth16 proof (A in G1, B in G2, C in G1)."""
    a: G1Point
    b: G2Point
    c: G1Point

    def to_words(self) -> list[int]:
        """Flatten to the verifier contract order.

        G2 coordinates are emitted c1 first, as the precompile expects.
        """
        return [
            self.a.x, self.a.y,
            self.b.x[1], self.b.x[0],
            self.b.y[1], self.b.y[0],
            self.c.x, self.c.y,
        ]

    @classmethod
    def from_words(cls, words: list[int]) -> "Groth16Proof":
        """Inverse of to_words()."""
        if len(words) != PROOF_WORDS:
            raise ValueError(f"expected {PROOF_WORDS} words, got {len(words)}")
        ax, ay, bx1, bx0, by1, by0, cx, cy = (int(w) for w in words)
        return cls(
            a=G1Point(ax, ay),
            b=G2Point((bx0, bx1), (by0, by1)),
            c=G1Point(cx, cy),
        )

    def to_solidity_args(self) -> dict[str, Any]:
        """verifyProof(a, b, c, input) argument layout, as decimal strings."""
        w = [str(v) for v in self.to_words()]
        return {
            "a": w[0:2],
            "b": [w[2:4], w[4:6]],
            "c": w[6:8],
        }
