"""Top-level batch proof generation.

Orchestrates one job: fetch the framed request, decode transcripts and public
inputs, prove and self-verify each round, encode the proof batch, deliver it.
Any failure aborts the whole batch; no partial result is ever delivered.
"""

import logging
import random
import time
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, Sequence, Union

from protocol.config import ProverConfig
from protocol.engine import AssignmentBuilder, ProvingEngine
from protocol.errors import (
    KeyMaterialError,
    ProverError,
    ProvingError,
    ShapeError,
    VerificationMismatch,
)
from protocol.proof import Groth16Proof
from protocol.transcript import RoundTranscript
from protocol.wire import (
    PUBLIC_INPUT_SIZE,
    decode_public_batch,
    decode_transcript_batch,
    encode_proof_batch,
    split_request,
)

log = logging.getLogger(__name__)

# --- Type Aliases ---
RoundIndex = int


class Transport(Protocol):
    def fetch(self) -> bytes: ...
    def deliver(self, body: bytes) -> None: ...


# --- Key Material ---

@dataclass(frozen=True)
class KeyMaterial:
    """Proving key and processed verification key, loaded once per process."""
    proving_key: Any
    processed_vk: Any

    @classmethod
    def from_blob(cls, engine: ProvingEngine, blob: bytes) -> "KeyMaterial":
        pk = engine.load_proving_key(blob)
        pvk = engine.process_vk(engine.verifying_key(pk))
        return cls(proving_key=pk, processed_vk=pvk)

    @classmethod
    def load(cls, engine: ProvingEngine, path: Union[str, Path]) -> "KeyMaterial":
        path = Path(path)
        t0 = time.perf_counter()
        try:
            blob = path.read_bytes()
        except OSError as e:
            raise KeyMaterialError(f"cannot read proving key {path}: {e}") from e
        keys = cls.from_blob(engine, blob)
        log.info("Loaded proving key %s in %.2fs", path, time.perf_counter() - t0)
        return keys


def new_random_source() -> random.Random:
    """Independent OS-seeded randomness for one proving call."""
    return random.SystemRandom()


# --- Shape Check ---

def check_batch(transcripts: Sequence[RoundTranscript], publics: Sequence[Any],
                public_size: int = PUBLIC_INPUT_SIZE) -> None:
    """Raise ShapeError if the batch cannot be proved as a whole."""
    if len(transcripts) != len(publics):
        raise ShapeError(
            f"batch length mismatch: {len(transcripts)} transcripts, {len(publics)} public inputs"
        )
    for i, (t, p) in enumerate(zip(transcripts, publics)):
        try:
            t.validate()
        except ShapeError as e:
            raise ShapeError(f"round {i}: {e}") from e
        if len(p) != public_size:
            raise ShapeError(f"round {i}: expected {public_size} public inputs, got {len(p)}")


# --- Per-Round Proving ---

def prove_round(
    index: RoundIndex,
    transcript: RoundTranscript,
    publics: Any,
    engine: ProvingEngine,
    builder: AssignmentBuilder,
    keys: KeyMaterial,
) -> tuple[RoundIndex, Groth16Proof]:
    """Build, prove and self-verify one round."""
    t0 = time.perf_counter()
    try:
        assignment = builder(transcript)
        proof = engine.prove(keys.proving_key, assignment, new_random_source())
    except ProverError:
        raise
    except Exception as e:
        raise ProvingError(f"round {index}: proving failed: {e}", index=index) from e
    elapsed = time.perf_counter() - t0

    try:
        verified = engine.verify(keys.processed_vk, publics, proof)
    except ProverError:
        raise
    except Exception as e:
        raise VerificationMismatch(
            f"round {index}: self-verification failed: {e}", index=index
        ) from e
    if not verified:
        raise VerificationMismatch(
            f"round {index}: proof does not verify against its public inputs", index=index
        )
    log.debug("Round %d proved in %.2fs", index, elapsed)
    return index, proof


def prove_batch(
    transcripts: Sequence[RoundTranscript],
    publics: Sequence[Any],
    engine: ProvingEngine,
    builder: AssignmentBuilder,
    keys: KeyMaterial,
    max_workers: int = 1,
    public_size: int = PUBLIC_INPUT_SIZE,
) -> list[Groth16Proof]:
    """Prove every round, returning proofs in input order.

    The batch is shape-checked before any proving call. Rounds run on a pool of
    max_workers threads; the first failure cancels rounds not yet started and
    is re-raised.
    """
    check_batch(transcripts, publics, public_size)
    n = len(transcripts)
    proofs: list[Groth16Proof | None] = [None] * n

    if max_workers <= 1 or n <= 1:
        for i, (t, p) in enumerate(zip(transcripts, publics)):
            _, proofs[i] = prove_round(i, t, p, engine, builder, keys)
        return proofs  # type: ignore[return-value]

    with ThreadPoolExecutor(max_workers=min(max_workers, n)) as ex:
        futs: list[Future] = [
            ex.submit(prove_round, i, t, p, engine, builder, keys)
            for i, (t, p) in enumerate(zip(transcripts, publics))
        ]
        done, pending = wait(futs, return_when=FIRST_EXCEPTION)
        for fut in pending:
            fut.cancel()
        # Lowest failing index wins so the reported error is deterministic
        for fut in futs:
            if fut in done and fut.exception() is not None:
                raise fut.exception()  # type: ignore[misc]
        for fut in futs:
            index, proof = fut.result()
            proofs[index] = proof
    return proofs  # type: ignore[return-value]


# --- Payload Processing ---

def process_payload(
    payload: bytes,
    engine: ProvingEngine,
    builder: AssignmentBuilder,
    keys: KeyMaterial,
    public_size: int = PUBLIC_INPUT_SIZE,
    max_workers: int = 1,
) -> bytes:
    """Framed request bytes -> encoded proof batch bytes."""
    transcript_bytes, public_bytes = split_request(payload)
    transcripts = decode_transcript_batch(transcript_bytes)
    publics = decode_public_batch(public_bytes, public_size)
    log.info("Decoded %d transcripts, %d public inputs", len(transcripts), len(publics))

    t0 = time.perf_counter()
    proofs = prove_batch(
        transcripts, publics, engine, builder, keys,
        max_workers=max_workers, public_size=public_size,
    )
    log.info("Proved %d rounds in %.2fs", len(proofs), time.perf_counter() - t0)
    return encode_proof_batch(proofs)


def run_job(
    config: ProverConfig,
    transport: Transport,
    engine: ProvingEngine,
    builder: AssignmentBuilder,
    keys: KeyMaterial,
) -> bytes:
    """Fetch, prove, deliver. Returns the delivered bytes."""
    payload = transport.fetch()
    result = process_payload(
        payload, engine, builder, keys,
        public_size=config.public_input_size,
        max_workers=config.workers,
    )
    transport.deliver(result)
    log.info("Delivered proof batch (%d bytes)", len(result))
    return result
