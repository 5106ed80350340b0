"""Round transcript model.

One round of Ludo history as claimed by the client: 16 turns of 3 move codes,
the 16 piece positions, and a nonce tag.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Sequence, Union

from primitives.packing import OPERATION_RADIX, PIECE_RADIX
from protocol.errors import ShapeError

# --- Circuit Shape Constants ---

ROUND_LEN = 16          # turns per round
OPS_PER_TURN = 3        # move codes per turn
NUM_PIECES = 16
NUM_OPERATIONS = ROUND_LEN * OPS_PER_TURN


# --- Transcript ---

@dataclass
class RoundTranscript:
    """Claims for one round.

    Attributes:
        operations: ROUND_LEN turns, each OPS_PER_TURN codes in [0, 4).
        pieces: NUM_PIECES positions in [0, 64).
        nonce: Non-negative integer as a decimal string (may exceed 64 bits).
    """
    operations: List[List[int]] = field(default_factory=list)
    pieces: List[int] = field(default_factory=list)
    nonce: str = "0"

    def flat_operations(self) -> List[int]:
        return [op for turn in self.operations for op in turn]

    def validate(self) -> None:
        """Raise ShapeError unless counts and symbol ranges match the circuit."""
        if len(self.operations) != ROUND_LEN:
            raise ShapeError(f"expected {ROUND_LEN} turns, got {len(self.operations)}")
        for i, turn in enumerate(self.operations):
            if len(turn) != OPS_PER_TURN:
                raise ShapeError(f"turn {i} has {len(turn)} operations, expected {OPS_PER_TURN}")
        ops = self.flat_operations()
        if len(ops) != NUM_OPERATIONS:
            raise ShapeError(f"expected {NUM_OPERATIONS} operations, got {len(ops)}")
        if len(self.pieces) != NUM_PIECES:
            raise ShapeError(f"expected {NUM_PIECES} pieces, got {len(self.pieces)}")
        _check_range("operation", ops, OPERATION_RADIX.radix)
        _check_range("piece", self.pieces, PIECE_RADIX.radix)
        nonce_value(self.nonce)

    # --- JSON ---

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "RoundTranscript":
        try:
            return cls(
                operations=[[int(op) for op in turn] for turn in data["operations"]],
                pieces=[int(p) for p in data["pieces"]],
                nonce=str(data["nonce"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ShapeError(f"malformed transcript JSON: {e}") from e

    def to_json(self) -> dict[str, Any]:
        return {
            "operations": [list(turn) for turn in self.operations],
            "pieces": list(self.pieces),
            "nonce": self.nonce,
        }


def _check_range(kind: str, symbols: Sequence[int], radix: int) -> None:
    for i, s in enumerate(symbols):
        if not 0 <= s < radix:
            raise ShapeError(f"{kind} symbol {i} out of range [0, {radix}): {s}")


def nonce_value(nonce: str) -> int:
    """Parse a decimal nonce string into a uint256 value."""
    if not isinstance(nonce, str) or not nonce.isdigit() or not nonce.isascii():
        raise ShapeError(f"nonce must be a decimal string, got {nonce!r}")
    value = int(nonce)
    if value >> 256:
        raise ShapeError(f"nonce does not fit in 256 bits: {nonce}")
    return value


def group_operations(flat: Sequence[int]) -> List[List[int]]:
    """Regroup a flat operation list into turns of OPS_PER_TURN."""
    if len(flat) % OPS_PER_TURN:
        raise ShapeError(f"operation count {len(flat)} is not a multiple of {OPS_PER_TURN}")
    return [list(flat[i:i + OPS_PER_TURN]) for i in range(0, len(flat), OPS_PER_TURN)]


def load_transcripts(path: Union[str, Path]) -> List[RoundTranscript]:
    """Load one transcript object or a list of them from a JSON file."""
    with open(path) as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = [data]
    return [RoundTranscript.from_json(d) for d in data]
