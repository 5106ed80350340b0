#!/usr/bin/env python3
"""Batch Groth16 prover for Ludo round transcripts.

Usage:
    INPUT=https://jobs.example/123 PROVING_ENGINE=my_engine:Engine \\
    ASSIGNMENT_BUILDER=ludo_circuit:build_assignment \\
        python gen_proof.py run

    python gen_proof.py encode-inputs --transcripts rounds.json [--publics publics.json]
    python gen_proof.py decode-proofs 0x...

`run` fetches the framed request from $INPUT, proves every round with the
proving key at $PROVING_KEY, self-verifies each proof and posts the proof batch
back to $INPUT. The other subcommands build and inspect wire payloads.
"""

import argparse
import json
import logging
import sys

from protocol.config import ProverConfig
from protocol.engine import load_capability
from protocol.errors import ProverError
from protocol.prover import KeyMaterial, run_job
from protocol.transcript import load_transcripts
from protocol.transport import HttpTransport
from protocol.wire import (
    PUBLIC_INPUT_SIZE,
    decode_proof_batch,
    encode_public_batch,
    encode_transcript_batch,
    frame_request,
)

log = logging.getLogger("gen_proof")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def cmd_run(args: argparse.Namespace) -> int:
    config = ProverConfig.from_env()
    _configure_logging(config.log_level)

    if not config.engine or not config.assignment_builder:
        raise ValueError("PROVING_ENGINE and ASSIGNMENT_BUILDER must both be set")
    engine = load_capability(config.engine)
    builder = load_capability(config.assignment_builder)
    keys = KeyMaterial.load(engine, config.proving_key_path)

    transport = HttpTransport(config.input_url, timeout=config.timeout_s)
    try:
        run_job(config, transport, engine, builder, keys)
    finally:
        transport.close()
    return 0


def cmd_encode_inputs(args: argparse.Namespace) -> int:
    transcript_bytes = encode_transcript_batch(load_transcripts(args.transcripts))
    if args.publics is None:
        print("0x" + transcript_bytes.hex())
        return 0

    with open(args.publics) as f:
        publics = [[int(v) for v in row] for row in json.load(f)]
    public_bytes = encode_public_batch(publics, args.size)
    print("0x" + frame_request(transcript_bytes, public_bytes).hex())
    return 0


def cmd_decode_proofs(args: argparse.Namespace) -> int:
    data = bytes.fromhex(args.hex.removeprefix("0x"))
    proofs = decode_proof_batch(data)
    print(json.dumps([p.to_solidity_args() for p in proofs], indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Generate and self-verify Groth16 proofs for a batch of Ludo rounds."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_run = sub.add_parser("run", help="Fetch a job from $INPUT, prove it, deliver the proofs")
    p_run.set_defaults(func=cmd_run)

    p_enc = sub.add_parser("encode-inputs", help="Encode transcripts (and publics) to wire hex")
    p_enc.add_argument("--transcripts", required=True, help="JSON transcript object or list")
    p_enc.add_argument("--publics", help="JSON list of public input vectors")
    p_enc.add_argument("--size", type=int, default=PUBLIC_INPUT_SIZE,
                       help="Public inputs per round")
    p_enc.set_defaults(func=cmd_encode_inputs)

    p_dec = sub.add_parser("decode-proofs", help="Decode a proof batch to verifyProof() arguments")
    p_dec.add_argument("hex", help="0x-prefixed proof batch")
    p_dec.set_defaults(func=cmd_decode_proofs)

    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except (ProverError, ValueError) as e:
        if not logging.getLogger().handlers:
            _configure_logging("INFO")
        log.error("%s: %s", type(e).__name__, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
