"""Tests for batch proof orchestration."""

import random

import pytest

from primitives.field import BN254_SCALAR_ORDER
from protocol.config import ProverConfig
from protocol.errors import (
    DecodeError,
    KeyMaterialError,
    ProverError,
    ProvingError,
    ShapeError,
    VerificationMismatch,
)
from protocol.prover import (
    KeyMaterial,
    check_batch,
    new_random_source,
    process_payload,
    prove_batch,
    prove_round,
    run_job,
)
from protocol.transcript import RoundTranscript
from protocol.wire import (
    decode_proof_batch,
    decode_public_batch,
    encode_public_batch,
    encode_transcript_batch,
    frame_request,
)
from tests.toy_engine import ToyEngine, toy_assignment, toy_publics


def _round(zero: RoundTranscript, nonce: int) -> RoundTranscript:
    return RoundTranscript(
        operations=[list(t) for t in zero.operations],
        pieces=list(zero.pieces),
        nonce=str(nonce),
    )


def _request(transcripts, publics=None) -> bytes:
    if publics is None:
        publics = [toy_publics(t) for t in transcripts]
    return frame_request(encode_transcript_batch(transcripts), encode_public_batch(publics))


class FakeTransport:
    def __init__(self, payload: bytes) -> None:
        self.payload = payload
        self.delivered: list[bytes] = []

    def fetch(self) -> bytes:
        return self.payload

    def deliver(self, body: bytes) -> None:
        self.delivered.append(body)


@pytest.fixture
def engine() -> ToyEngine:
    return ToyEngine()


@pytest.fixture
def keys(engine) -> KeyMaterial:
    return KeyMaterial.from_blob(engine, b"proving-key")


@pytest.fixture
def batch(zero_transcript, mixed_transcript):
    transcripts = [mixed_transcript] + [_round(zero_transcript, n) for n in range(2, 7)]
    publics = decode_public_batch(encode_public_batch([toy_publics(t) for t in transcripts]))
    return transcripts, publics


class TestKeyMaterial:
    def test_from_blob(self, engine) -> None:
        keys = KeyMaterial.from_blob(engine, b"k")
        assert keys.proving_key.secret == b"k"
        assert keys.processed_vk == engine.process_vk(b"k")

    def test_load(self, engine, tmp_path) -> None:
        path = tmp_path / "prover_key.bin"
        path.write_bytes(b"on-disk")
        assert KeyMaterial.load(engine, path) == KeyMaterial.from_blob(engine, b"on-disk")

    def test_missing_key_file(self, engine, tmp_path) -> None:
        """An unreadable key is a ProverError, not a bare OSError."""
        with pytest.raises(KeyMaterialError):
            KeyMaterial.load(engine, tmp_path / "absent.bin")

    def test_random_source_is_os_backed(self) -> None:
        rng = new_random_source()
        assert isinstance(rng, random.SystemRandom)
        assert rng is not new_random_source()


class TestCheckBatch:
    def test_length_mismatch(self, batch) -> None:
        transcripts, publics = batch
        with pytest.raises(ShapeError):
            check_batch(transcripts, publics[:-1])

    def test_public_size(self, batch) -> None:
        transcripts, publics = batch
        with pytest.raises(ShapeError):
            check_batch(transcripts, publics, public_size=3)

    def test_bad_transcript_reports_round(self, batch) -> None:
        transcripts, publics = batch
        transcripts[2].pieces.append(1)
        with pytest.raises(ShapeError, match="round 2"):
            check_batch(transcripts, publics)


class TestProveRound:
    """Prove then self-verify a single round."""

    def test_proof_verifies(self, engine, keys, mixed_transcript) -> None:
        publics = toy_publics(mixed_transcript)
        index, proof = prove_round(4, mixed_transcript, publics, engine, toy_assignment, keys)
        assert index == 4
        assert engine.verify(keys.processed_vk, publics, proof)

    def test_fresh_randomness_per_proof(self, engine, keys, mixed_transcript) -> None:
        """Two proofs of the same round differ but both verify."""
        publics = toy_publics(mixed_transcript)
        _, p1 = prove_round(0, mixed_transcript, publics, engine, toy_assignment, keys)
        _, p2 = prove_round(0, mixed_transcript, publics, engine, toy_assignment, keys)
        assert p1.to_words() != p2.to_words()
        assert engine.verify(keys.processed_vk, publics, p1)
        assert engine.verify(keys.processed_vk, publics, p2)

    def test_engine_failure_is_proving_error(self, keys, zero_transcript) -> None:
        engine = ToyEngine(fail_on={1})
        with pytest.raises(ProvingError) as exc:
            prove_round(3, zero_transcript, toy_publics(zero_transcript), engine, toy_assignment, keys)
        assert exc.value.index == 3
        assert isinstance(exc.value.__cause__, RuntimeError)

    def test_wrong_publics_is_mismatch(self, engine, keys, zero_transcript) -> None:
        with pytest.raises(VerificationMismatch) as exc:
            prove_round(1, zero_transcript, [1, 999], engine, toy_assignment, keys)
        assert exc.value.index == 1

    def test_verify_exception_is_prover_error(self, keys, zero_transcript) -> None:
        """An engine whose verify raises still surfaces a ProverError for the round."""
        engine = ToyEngine()

        def broken_verify(processed_vk, publics, proof):
            raise RuntimeError("bad publics")

        engine.verify = broken_verify
        with pytest.raises(VerificationMismatch) as exc:
            prove_round(2, zero_transcript, toy_publics(zero_transcript), engine, toy_assignment, keys)
        assert isinstance(exc.value, ProverError)
        assert exc.value.index == 2
        assert isinstance(exc.value.__cause__, RuntimeError)


class TestProveBatch:
    """Whole-batch proving, sequential and pooled."""

    @pytest.mark.parametrize("workers", [1, 4])
    def test_order_preserved(self, engine, keys, batch, workers) -> None:
        transcripts, publics = batch
        proofs = prove_batch(transcripts, publics, engine, toy_assignment, keys, max_workers=workers)
        assert len(proofs) == len(transcripts)
        for p, pub in zip(proofs, publics):
            assert engine.verify(keys.processed_vk, pub, p)
        # Each proof is bound to its own round's publics
        assert not engine.verify(keys.processed_vk, publics[1], proofs[0])

    def test_mismatch_before_any_proving(self, engine, keys, batch) -> None:
        transcripts, publics = batch
        with pytest.raises(ShapeError):
            prove_batch(transcripts, publics[:3], engine, toy_assignment, keys)
        assert engine.prove_calls == 0

    @pytest.mark.parametrize("workers", [1, 3])
    def test_failure_aborts_batch(self, keys, batch, workers) -> None:
        transcripts, publics = batch
        engine = ToyEngine(fail_on={4})
        with pytest.raises(ProvingError) as exc:
            prove_batch(transcripts, publics, engine, toy_assignment, keys, max_workers=workers)
        assert exc.value.index == 3

    def test_sequential_stops_at_first_failure(self, keys, batch) -> None:
        transcripts, publics = batch
        engine = ToyEngine(fail_on={2})
        with pytest.raises(ProvingError):
            prove_batch(transcripts, publics, engine, toy_assignment, keys)
        assert engine.prove_calls == 2

    def test_verification_mismatch_aborts(self, engine, keys, batch) -> None:
        transcripts, publics = batch
        publics = list(reversed(publics))
        with pytest.raises(VerificationMismatch):
            prove_batch(transcripts, publics, engine, toy_assignment, keys, max_workers=2)


class TestProcessPayload:
    def test_end_to_end(self, engine, keys, zero_transcript, mixed_transcript) -> None:
        transcripts = [zero_transcript, mixed_transcript]
        out = process_payload(_request(transcripts), engine, toy_assignment, keys)
        proofs = decode_proof_batch(out)
        assert len(proofs) == 2
        for p, t in zip(proofs, transcripts):
            assert engine.verify(keys.processed_vk, toy_publics(t), p)

    def test_count_mismatch(self, engine, keys, zero_transcript) -> None:
        payload = _request([zero_transcript, zero_transcript], [toy_publics(zero_transcript)])
        with pytest.raises(ShapeError):
            process_payload(payload, engine, toy_assignment, keys)
        assert engine.prove_calls == 0

    def test_garbage_segment(self, engine, keys) -> None:
        with pytest.raises(DecodeError):
            process_payload(frame_request(b"\x01" * 10, b""), engine, toy_assignment, keys)

    def test_public_reduction_feeds_verify(self, engine, keys, zero_transcript) -> None:
        """A nonce word of r + 1 in the publics still verifies against nonce 1."""
        payload = _request([zero_transcript], [[1, BN254_SCALAR_ORDER + 1]])
        out = process_payload(payload, engine, toy_assignment, keys)
        assert len(decode_proof_batch(out)) == 1


class TestRunJob:
    def test_delivers_once(self, engine, keys, mixed_transcript) -> None:
        transport = FakeTransport(_request([mixed_transcript] * 3))
        config = ProverConfig(input_url="http://job", workers=2)
        result = run_job(config, transport, engine, toy_assignment, keys)
        assert transport.delivered == [result]
        assert len(decode_proof_batch(result)) == 3

    def test_no_delivery_on_failure(self, keys, zero_transcript) -> None:
        transport = FakeTransport(_request([zero_transcript]))
        engine = ToyEngine(fail_on={1})
        with pytest.raises(ProvingError):
            run_job(ProverConfig(input_url="http://job"), transport, engine, toy_assignment, keys)
        assert transport.delivered == []
