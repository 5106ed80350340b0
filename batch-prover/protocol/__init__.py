"""Protocol - Wire formats and batch proof orchestration."""

from protocol.errors import (
    DecodeError,
    KeyMaterialError,
    ProverError,
    ProvingError,
    ShapeError,
    TransportError,
    VerificationMismatch,
)
from protocol.transcript import NUM_PIECES, ROUND_LEN, RoundTranscript
from protocol.proof import G1Point, G2Point, Groth16Proof
from protocol.wire import (
    decode_proof_batch,
    decode_public_batch,
    decode_transcript_batch,
    encode_proof_batch,
    encode_public_batch,
    encode_transcript_batch,
    frame_request,
    split_request,
)
from protocol.engine import AssignmentBuilder, ProvingEngine, load_capability
from protocol.config import ProverConfig
from protocol.prover import KeyMaterial, process_payload, prove_batch, run_job

__all__ = [
    # Errors
    "ProverError",
    "ShapeError",
    "DecodeError",
    "ProvingError",
    "VerificationMismatch",
    "TransportError",
    "KeyMaterialError",
    # Data model
    "RoundTranscript",
    "ROUND_LEN",
    "NUM_PIECES",
    "G1Point",
    "G2Point",
    "Groth16Proof",
    # Wire
    "encode_transcript_batch",
    "decode_transcript_batch",
    "decode_public_batch",
    "encode_public_batch",
    "encode_proof_batch",
    "decode_proof_batch",
    "split_request",
    "frame_request",
    # Orchestration
    "ProvingEngine",
    "AssignmentBuilder",
    "load_capability",
    "ProverConfig",
    "KeyMaterial",
    "prove_batch",
    "process_payload",
    "run_job",
]
