"""Capabilities consumed from the proving system and the game circuit.

The batch prover never touches curve arithmetic or constraint systems. It
drives an engine through the ProvingEngine protocol and turns transcripts into
circuit assignments through an AssignmentBuilder. Concrete implementations are
named in configuration as "package.module:attribute" and resolved at startup.
"""

import importlib
import inspect
from random import Random
from typing import Any, Protocol

from protocol.proof import Groth16Proof
from protocol.transcript import RoundTranscript


class ProvingEngine(Protocol):
    """Groth16 prover/verifier over BN254."""

    def load_proving_key(self, blob: bytes) -> Any:
        """Deserialize proving key material."""
        ...

    def verifying_key(self, proving_key: Any) -> Any:
        """Verification key embedded in the proving key."""
        ...

    def process_vk(self, verifying_key: Any) -> Any:
        """Precompute the verification key for repeated verify() calls."""
        ...

    def prove(self, proving_key: Any, assignment: Any, rng: Random) -> Groth16Proof:
        ...

    def verify(self, processed_vk: Any, publics: Any, proof: Groth16Proof) -> bool:
        ...


class AssignmentBuilder(Protocol):
    """Deterministic transcript -> circuit assignment."""

    def __call__(self, transcript: RoundTranscript) -> Any:
        ...


def load_capability(spec: str) -> Any:
    """Resolve "package.module:attribute".

    Classes and zero-argument factories are called; other objects are returned
    as-is.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"capability must look like 'package.module:attribute', got {spec!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"cannot import {module_name!r} for capability {spec!r}") from e

    obj = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ValueError(f"{module_name!r} has no attribute {attr!r}") from e

    if inspect.isclass(obj) or (inspect.isfunction(obj) and _is_factory(obj)):
        return obj()
    return obj


def _is_factory(fn: Any) -> bool:
    """True for functions taking no required arguments."""
    params = inspect.signature(fn).parameters.values()
    return all(
        p.default is not p.empty or p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
        for p in params
    )
