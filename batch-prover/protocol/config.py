"""Prover job configuration, read from the environment."""

import os
from dataclasses import dataclass
from importlib.resources import files
from pathlib import Path
from typing import Mapping, Optional

from protocol.wire import PUBLIC_INPUT_SIZE

# Package data under protocol/materials/
DEFAULT_PROVING_KEY = Path(str(files(__package__) / "materials" / "prover_key.bin"))
DEFAULT_TIMEOUT_S = 300.0


def _positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


def _positive_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be > 0, got {value}")
    return value


@dataclass(frozen=True)
class ProverConfig:
    """Settings for one prover invocation.

    Attributes:
        input_url: Endpoint the job is fetched from and the proofs posted back to.
        proving_key_path: Serialized proving key, loaded once at startup.
        public_input_size: Field elements per round public input (K).
        workers: Rounds proved concurrently; 1 proves sequentially.
        timeout_s: Per-request transport timeout.
        engine: "module:attribute" of the ProvingEngine implementation.
        assignment_builder: "module:attribute" of the AssignmentBuilder.
        log_level: Root logging level name.
    """
    input_url: str
    proving_key_path: Path = DEFAULT_PROVING_KEY
    public_input_size: int = PUBLIC_INPUT_SIZE
    workers: int = 1
    timeout_s: float = DEFAULT_TIMEOUT_S
    engine: Optional[str] = None
    assignment_builder: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProverConfig":
        env = os.environ if environ is None else environ

        input_url = env.get("INPUT")
        if not input_url:
            raise ValueError("env INPUT missing")

        return cls(
            input_url=input_url,
            proving_key_path=Path(env.get("PROVING_KEY", str(DEFAULT_PROVING_KEY))),
            public_input_size=_positive_int(
                "PUBLIC_INPUT_SIZE", env.get("PUBLIC_INPUT_SIZE", str(PUBLIC_INPUT_SIZE))
            ),
            workers=_positive_int("PROVER_WORKERS", env.get("PROVER_WORKERS", "1")),
            timeout_s=_positive_float(
                "TRANSPORT_TIMEOUT", env.get("TRANSPORT_TIMEOUT", str(DEFAULT_TIMEOUT_S))
            ),
            engine=env.get("PROVING_ENGINE") or None,
            assignment_builder=env.get("ASSIGNMENT_BUILDER") or None,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
