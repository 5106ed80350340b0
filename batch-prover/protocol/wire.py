"""ABI wire formats exchanged with the job endpoint and the verifier contract.

Request:  [L: u32 BE][L bytes: transcript batch][public-input batch]
Response: proof batch

Transcript batch:   (uint256 packedOperations, uint256 packedPieces, uint256 nonce)[]
Public-input batch: uint256[K][]
Proof batch:        uint256[8][]  as [Ax, Ay, Bx.c1, Bx.c0, By.c1, By.c0, Cx, Cy]

All three are standard Solidity ABI encodings of a single dynamic array, so the
same bytes can be handed to the on-chain verifier unchanged.
"""

import struct
from typing import Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError

from primitives.field import FR, fr_to_words, fr_vector
from primitives.packing import OPERATION_RADIX, PIECE_RADIX
from protocol.errors import DecodeError, ShapeError
from protocol.proof import PROOF_WORDS, Groth16Proof
from protocol.transcript import (
    NUM_OPERATIONS,
    NUM_PIECES,
    RoundTranscript,
    group_operations,
    nonce_value,
)

# --- ABI Types ---

TRANSCRIPT_BATCH_TYPE = "(uint256,uint256,uint256)[]"
PROOF_BATCH_TYPE = f"uint256[{PROOF_WORDS}][]"

# Default public-input vector length
PUBLIC_INPUT_SIZE = 2

# Request frame header: big-endian u32 length of the transcript segment
_FRAME_HEADER = struct.Struct(">I")


def public_batch_type(size: int) -> str:
    if size < 1:
        raise ValueError(f"public input size must be >= 1, got {size}")
    return f"uint256[{size}][]"


def _decode_array(abi_type: str, data: bytes, what: str) -> tuple:
    try:
        (items,) = decode([abi_type], bytes(data))
    except (DecodingError, ValueError, OverflowError) as e:
        raise DecodeError(f"malformed {what}: {e}") from e
    return items


# --- Transcript Batch ---

def encode_transcript_batch(transcripts: Sequence[RoundTranscript]) -> bytes:
    """Pack and ABI-encode a batch of transcripts.

    Shapes and symbol ranges are checked before packing; nothing is padded or
    truncated.
    """
    triples = []
    for t in transcripts:
        t.validate()
        packed_operations = OPERATION_RADIX.pack(t.flat_operations())
        packed_pieces = PIECE_RADIX.pack(t.pieces)
        triples.append((packed_operations, packed_pieces, nonce_value(t.nonce)))

    try:
        return encode([TRANSCRIPT_BATCH_TYPE], [triples])
    except EncodingError as e:
        raise ShapeError(f"transcript does not fit the wire layout: {e}") from e


def encode_transcript_batch_hex(transcripts: Sequence[RoundTranscript]) -> str:
    return "0x" + encode_transcript_batch(transcripts).hex()


def decode_transcript_batch(data: bytes) -> list[RoundTranscript]:
    """Inverse of encode_transcript_batch()."""
    transcripts = []
    for i, (packed_operations, packed_pieces, nonce) in enumerate(
        _decode_array(TRANSCRIPT_BATCH_TYPE, data, "transcript batch")
    ):
        try:
            operations = OPERATION_RADIX.unpack(packed_operations, NUM_OPERATIONS)
            pieces = PIECE_RADIX.unpack(packed_pieces, NUM_PIECES)
        except ValueError as e:
            raise DecodeError(f"round {i}: {e}") from e

        transcripts.append(RoundTranscript(
            operations=group_operations(operations),
            pieces=pieces,
            nonce=str(nonce),
        ))
    return transcripts


# --- Public-Input Batch ---

def decode_public_batch(data: bytes, size: int = PUBLIC_INPUT_SIZE) -> list[FR]:
    """Decode uint256[size][] into Fr vectors.

    Words are reduced modulo the scalar field order, never rejected.
    """
    rows = _decode_array(public_batch_type(size), data, "public input batch")
    return [fr_vector(row) for row in rows]


def encode_public_batch(publics: Sequence, size: int = PUBLIC_INPUT_SIZE) -> bytes:
    """Encode Fr vectors (or int sequences) as uint256[size][]."""
    abi_type = public_batch_type(size)
    rows = []
    for i, p in enumerate(publics):
        words = fr_to_words(p)
        if len(words) != size:
            raise ShapeError(f"public input {i} has {len(words)} values, expected {size}")
        rows.append(words)
    try:
        return encode([abi_type], [rows])
    except EncodingError as e:
        raise ShapeError(f"public input does not fit the wire layout: {e}") from e


# --- Proof Batch ---

def encode_proof_batch(proofs: Sequence[Groth16Proof]) -> bytes:
    return encode([PROOF_BATCH_TYPE], [[p.to_words() for p in proofs]])


def decode_proof_batch(data: bytes) -> list[Groth16Proof]:
    proofs = []
    for i, words in enumerate(_decode_array(PROOF_BATCH_TYPE, data, "proof batch")):
        try:
            proofs.append(Groth16Proof.from_words(list(words)))
        except ValueError as e:
            raise DecodeError(f"proof {i}: {e}") from e
    return proofs


# --- Request Framing ---

def split_request(payload: bytes) -> tuple[bytes, bytes]:
    """Split a request into (transcript batch bytes, public batch bytes)."""
    header = _FRAME_HEADER.size
    if len(payload) < header:
        raise DecodeError(f"request too short for length header: {len(payload)} bytes")
    (length,) = _FRAME_HEADER.unpack_from(payload)
    end = header + length
    if len(payload) < end:
        raise DecodeError(
            f"transcript segment length {length} exceeds payload ({len(payload) - header} bytes)"
        )
    return bytes(payload[header:end]), bytes(payload[end:])


def frame_request(transcript_bytes: bytes, public_bytes: bytes) -> bytes:
    if len(transcript_bytes) > 0xFFFFFFFF:
        raise ValueError("transcript segment longer than a u32 length prefix allows")
    return _FRAME_HEADER.pack(len(transcript_bytes)) + transcript_bytes + public_bytes
