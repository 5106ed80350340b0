"""
Pytest configuration for batch prover tests.
"""

import sys
from pathlib import Path

import pytest

# Add the source directory to the path so absolute imports work
# (tests/ is inside the source directory, so parent is the source root)
src_dir = Path(__file__).parent.parent
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from protocol.transcript import NUM_PIECES, ROUND_LEN, RoundTranscript  # noqa: E402


@pytest.fixture
def zero_transcript() -> RoundTranscript:
    """All-zero round with nonce 1 (scenario A)."""
    return RoundTranscript(
        operations=[[0, 0, 0] for _ in range(ROUND_LEN)],
        pieces=[0] * NUM_PIECES,
        nonce="1",
    )


@pytest.fixture
def mixed_transcript() -> RoundTranscript:
    """Non-zero operations and pieces with a 60-bit nonce (scenario B)."""
    return RoundTranscript(
        operations=[
            [1, 2, 3], [0, 0, 0], [1, 1, 1], [2, 2, 2],
            [3, 3, 3], [1, 2, 3], [2, 2, 2], [3, 3, 3],
            [0, 0, 0], [0, 0, 0], [0, 0, 3], [2, 0, 0],
            [2, 1, 0], [1, 2, 0], [1, 2, 0], [1, 2, 0],
        ],
        pieces=[1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 50, 51, 52, 53, 54, 0],
        nonce="123456789987654321",
    )
